from pathlib import Path

from fastapi import FastAPI, HTTPException

from .config import ExtractorConfig
from .exceptions import DocumentOpenError, OutputDirectoryError
from .models import ExtractRequest, ExtractResponse, ExtractTextRequest, ExtractTextResponse
from .service import ExtractionService


def create_app(config: ExtractorConfig | None = None) -> FastAPI:
    service = ExtractionService(config=config)
    app = FastAPI(
        title="PDF Structure Service",
        version="1.0.0",
        description="Text lines and images with related text from PDF documents.",
    )

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.post("/extract", response_model=ExtractResponse)
    def extract(request: ExtractRequest) -> ExtractResponse:
        try:
            if request.save_result:
                result, document_id, output_path = service.extract_and_save(
                    request.pdf_path, request.output_dir
                )
            else:
                result = service.extract(request.pdf_path, request.output_dir)
                document_id, output_path = Path(request.pdf_path).stem, None
        except OutputDirectoryError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except DocumentOpenError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except Exception as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc

        return ExtractResponse(
            document_id=document_id,
            pages=result.to_payload(),
            diagnostics=result.diagnostics,
            output_path=output_path,
        )

    @app.post("/extract-text", response_model=ExtractTextResponse)
    def extract_text(request: ExtractTextRequest) -> ExtractTextResponse:
        try:
            result = service.extract_text(request.pdf_path)
        except DocumentOpenError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except Exception as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc

        return ExtractTextResponse(
            document_id=Path(request.pdf_path).stem,
            pages=result.pages,
            diagnostics=result.diagnostics,
        )

    return app


app = create_app()
