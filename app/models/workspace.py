from typing import Literal, Optional

from pydantic import BaseModel

Framework = Literal["nextjs-app", "nextjs-pages", "astro", "remix", "unknown"]


class FrameworkInfo(BaseModel):
    type: Framework
    config_path: Optional[str] = None
    has_app_dir: Optional[bool] = None
    has_pages_dir: Optional[bool] = None
