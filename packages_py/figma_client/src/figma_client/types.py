"""
Type definitions for figma_client
"""
from dataclasses import dataclass
from typing import Dict, Optional

from pydantic import BaseModel, Field


class FigmaAuthOptions(BaseModel):
    """Static Figma credentials"""

    figma_api_key: str = Field(default="", repr=False)
    figma_oauth_token: str = Field(default="", repr=False)
    use_oauth: bool = False


@dataclass
class SvgOptions:
    """SVG render options passed to /images"""

    outline_text: bool = True
    include_id: bool = False
    simplify_stroke: bool = True

    def to_query_params(self) -> Dict[str, str]:
        return {
            "svg_outline_text": str(self.outline_text).lower(),
            "svg_include_id": str(self.include_id).lower(),
            "svg_simplify_stroke": str(self.simplify_stroke).lower(),
        }


@dataclass
class ImageDownloadItem:
    """
    One image to download.

    Items with `image_ref` are image fills; items with `node_id` are
    rendered nodes (SVG when `file_name` ends with .svg, PNG otherwise).
    """

    file_name: str
    image_ref: Optional[str] = None
    node_id: Optional[str] = None


@dataclass
class ImageDownloadResult:
    """A downloaded image on local disk"""

    file_path: str
    file_name: str
    url: str
    size_bytes: int
