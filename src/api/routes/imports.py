"""Import API Routes

FastAPI routes for turning uploaded spreadsheets into order line items.
"""

from fastapi import APIRouter, Depends, File, UploadFile, status

from config import ApplicationConfig
from src.api.error import ClientError
from src.app.services.schema_inference_service import SchemaInferenceService
from src.app.use_cases.imports.dtos import ImportLineItemsResponseDTO
from src.app.use_cases.imports.import_line_items import ImportLineItems
from src.depends import get_schema_inference_service, import_defaults

router = APIRouter(prefix="/imports", tags=["Imports"])


@router.post(
    "/line-items",
    response_model=ImportLineItemsResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        415: {
            "description": "Unsupported file type",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "UNSUPPORTED_FILE_TYPE",
                            "message": "Please upload a CSV or Excel file (.csv, .xlsx, .xls)"
                        }
                    }
                }
            }
        },
        429: {
            "description": "Classifier rate limited",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "CLASSIFIER_RATE_LIMITED",
                            "message": "Rate limit exceeded. Please try again later."
                        }
                    }
                }
            }
        },
        402: {
            "description": "Classifier requires payment",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "CLASSIFIER_PAYMENT_REQUIRED",
                            "message": "Payment required. Please add credits to your workspace."
                        }
                    }
                }
            }
        }
    }
)
async def import_line_items(
    file: UploadFile = File(...),
    schema_service: SchemaInferenceService = Depends(get_schema_inference_service),
):
    """
    Parse an uploaded CSV/Excel file into line items.

    Only the first sheet of a workbook is read. Column meaning
    (style number, description, quantity, unit price) is inferred.

    **Returns:**
    - 200: Items found, or `outcome=nothing_to_import`
    - 415: File extension not accepted
    - 429 / 402: Classifier rate limited / out of credits
    - 502: Classifier failed
    """
    content = await file.read()

    use_case = ImportLineItems(
        schema_service=schema_service,
        allowed_extensions=ApplicationConfig.ALLOWED_UPLOAD_EXTENSIONS,
        defaults=import_defaults(),
    )
    result = await use_case.execute(file.filename or "", content)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value
