"""ImportLineItems Use Case

Reads an uploaded CSV/Excel file and turns it into order line items.
"""

import logging
from typing import Iterable, List, Optional, Sequence
from libs.result import Result, Return, Error
from src.app.services.schema_inference_service import (
    PaymentRequiredError,
    RateLimitedError,
    SchemaInferenceError,
    SchemaInferenceService,
)
from src.domain.order import OrderLineItem
from src.domain.tabular_import import ImportDefaults, TabularImportRow
from .dtos import ImportedItemDTO, ImportLineItemsResponseDTO, ImportOutcome
from .normalize_tabular_file import TabularFileError, file_extension, normalize_tabular_file

logger = logging.getLogger(__name__)


def merge_import_rows(
    buffer: Sequence[OrderLineItem],
    rows: Iterable[TabularImportRow],
    defaults: ImportDefaults = ImportDefaults(),
) -> List[OrderLineItem]:
    """
    Append imported rows to a line-item editing buffer

    Rows with a negative price are skipped. Missing quantity and
    description take the values in defaults. The buffer itself is not
    modified.
    """
    merged = list(buffer)
    for row in rows:
        if row.unit_price < 0:
            logger.info(f"Skipping imported row {row.style_no}: negative price {row.unit_price}")
            continue
        merged.append(
            OrderLineItem(
                item_code=row.style_no,
                description=row.description if row.description else defaults.description,
                quantity=row.quantity if row.quantity is not None else defaults.quantity,
                unit_price=row.unit_price,
            )
        )
    return merged


class ImportLineItems:
    """
    Use Case: Import line items from an uploaded file

    Business Rules:
    1. Only allowed extensions are accepted, checked before any parsing
    2. Workbooks are reduced to their first sheet without blank rows
    3. Column meaning is inferred by the schema-inference service
    4. Rate limiting and payment problems are reported distinctly
    5. No rows is a successful nothing_to_import outcome

    Flow:
    1. Check extension
    2. Normalize to comma-separated text
    3. Classify rows
    4. Merge rows into line items with defaults
    """

    def __init__(
        self,
        schema_service: SchemaInferenceService,
        allowed_extensions: Sequence[str] = (".csv", ".xlsx", ".xls"),
        defaults: ImportDefaults = ImportDefaults(),
    ):
        self.schema_service = schema_service
        self.allowed_extensions = {ext.lower() for ext in allowed_extensions}
        self.defaults = defaults

    async def execute(
        self,
        file_name: str,
        content: bytes,
        buffer: Optional[Sequence[OrderLineItem]] = None,
    ) -> Result[ImportLineItemsResponseDTO]:
        """
        Execute line-item import

        Args:
            file_name: Upload name (the extension selects the reader)
            content: Raw upload bytes
            buffer: Line items already in the order being edited

        Returns:
            Result[ImportLineItemsResponseDTO]: imported items or error
        """
        # Step 1: Extension check
        extension = file_extension(file_name)
        if extension not in self.allowed_extensions:
            return Return.err(
                Error(
                    code="UNSUPPORTED_FILE_TYPE",
                    message="Please upload a CSV or Excel file (.csv, .xlsx, .xls)",
                    reason=f"Extension '{extension or file_name}' is not accepted",
                )
            )

        try:
            # Step 2: Normalize
            try:
                document = normalize_tabular_file(file_name, content)
            except TabularFileError as e:
                return Return.err(
                    Error(
                        code="INVALID_TABULAR_FILE",
                        message=str(e),
                        reason="File could not be read as a spreadsheet",
                    )
                )

            # Step 3: Classify
            try:
                rows = await self.schema_service.classify(document.content, file_name)
            except RateLimitedError as e:
                logger.warning(f"Classifier rate limited while importing {file_name}")
                return Return.err(
                    Error(
                        code="CLASSIFIER_RATE_LIMITED",
                        message="Rate limit exceeded. Please try again later.",
                        reason=str(e),
                    )
                )
            except PaymentRequiredError as e:
                logger.warning(f"Classifier payment required while importing {file_name}")
                return Return.err(
                    Error(
                        code="CLASSIFIER_PAYMENT_REQUIRED",
                        message="Payment required. Please add credits to your workspace.",
                        reason=str(e),
                    )
                )
            except SchemaInferenceError as e:
                logger.error(f"Classifier failed for {file_name}: {e}")
                return Return.err(
                    Error(
                        code="CLASSIFIER_FAILED",
                        message="Failed to parse file",
                        reason=str(e),
                    )
                )

            # Step 4: Merge
            existing = list(buffer or [])
            merged = merge_import_rows(existing, rows, self.defaults)
            imported = merged[len(existing):]
            skipped = len(rows) - len(imported)

            if not imported:
                logger.info(f"No items found in {file_name}")
                return Return.ok(
                    ImportLineItemsResponseDTO(
                        outcome=ImportOutcome.NOTHING_TO_IMPORT,
                        message="The file doesn't contain any valid items",
                        file_name=file_name,
                        source_kind=document.source_kind,
                        sheet_name=document.sheet_name,
                        row_count=document.row_count,
                        skipped_rows=skipped,
                    )
                )

            logger.info(f"Imported {len(imported)} items from {file_name}")
            return Return.ok(
                ImportLineItemsResponseDTO(
                    outcome=ImportOutcome.IMPORTED,
                    message=f"Found {len(imported)} items ready to import",
                    file_name=file_name,
                    source_kind=document.source_kind,
                    sheet_name=document.sheet_name,
                    row_count=document.row_count,
                    items=[ImportedItemDTO.from_line_item(item) for item in imported],
                    skipped_rows=skipped,
                )
            )

        except Exception as e:
            logger.exception(f"Import of {file_name} failed")
            return Return.err(
                Error(
                    code="IMPORT_LINE_ITEMS_FAILED",
                    message="Failed to import line items",
                    reason=str(e),
                )
            )
