"""
FastAPI backend for the sheet export engine.
Accepts records as JSON and streams them back as an .xlsx download.
"""

import io
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from config import app_config
from models import ColumnSpec, ColumnType, ExtractionStrategy, OverflowMode
from export import (
    ConfigurationError,
    ChannelError,
    XLSX_MEDIA_TYPE,
    export_document,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, app_config.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Sheet Export API",
    description="API for exporting tabular records to single-sheet Excel documents",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request models
class ExportRequest(BaseModel):
    filename: str = Field(default_factory=lambda: app_config.default_filename)
    headers: List[str]
    # Mapping keys per column; defaults to the headers themselves
    bindings: Optional[List[str]] = None
    column_types: Optional[List[ColumnType]] = None
    records: List[Dict[str, Any]] = []
    overflow_threshold: Optional[int] = None
    overflow_mode: Optional[OverflowMode] = None

    def columns(self) -> List[ColumnSpec]:
        """Column specs for the request; raises ConfigurationError on count mismatch."""
        bindings = self.bindings if self.bindings is not None else self.headers
        types = self.column_types or [ColumnType.TEXT] * len(self.headers)

        if len(bindings) != len(self.headers):
            raise ConfigurationError(
                f"{len(self.headers)} headers but {len(bindings)} column bindings"
            )
        if len(types) != len(self.headers):
            raise ConfigurationError(
                f"{len(self.headers)} headers but {len(types)} column types"
            )

        return [
            ColumnSpec(header=h, binding=b, column_type=t)
            for h, b, t in zip(self.headers, bindings, types)
        ]


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Sheet Export",
        "version": "1.0.0"
    }


@app.post("/export")
def export_excel(request: ExportRequest) -> Response:
    """
    Export records to an Excel file.

    Args:
        request: Headers, bindings and records to export

    Returns:
        Excel file, served inline
    """
    if len(request.records) > app_config.max_export_records:
        raise HTTPException(
            status_code=413,
            detail=f"Too many records: {len(request.records)} > {app_config.max_export_records}"
        )

    buffer = io.BytesIO()
    try:
        export_document(
            request.columns(),
            request.records,
            buffer,
            strategy=ExtractionStrategy.KEY,
            threshold=request.overflow_threshold,
            overflow_mode=request.overflow_mode,
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ChannelError as e:
        logger.error(f"Export of {request.filename} failed: {e}")
        raise HTTPException(status_code=500, detail="Export failed")
    finally:
        content = buffer.getvalue()
        buffer.close()

    logger.info(f"Exported {len(request.records)} records as {request.filename}")
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'inline; filename="{_safe_filename(request.filename)}"'}
    )


@app.get("/health")
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "max_export_records": app_config.max_export_records,
    }


def _safe_filename(filename: str) -> str:
    cleaned = "".join(ch for ch in filename if ch.isascii() and ch.isprintable() and ch not in '"\\')
    return cleaned or app_config.default_filename


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=app_config.api_host,
        port=app_config.api_port,
        reload=True
    )
