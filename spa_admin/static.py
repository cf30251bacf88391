"""Static bundle serving with client-side routing fallback"""

import logging

from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class SPAStaticFiles(StaticFiles):
    """
    Serves the built frontend. Paths that match no file get index.html so the
    browser router can resolve them; paths under `excluded_prefix` keep their 404.
    """

    def __init__(self, *args, excluded_prefix: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self.excluded_prefix = excluded_prefix.strip("/")

    async def get_response(self, path: str, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as e:
            if e.status_code != 404:
                raise
            if self.excluded_prefix and (
                path == self.excluded_prefix or path.startswith(f"{self.excluded_prefix}/")
            ):
                raise
            logger.debug(f"No static file for /{path}, serving index.html")
            return await super().get_response("index.html", scope)
