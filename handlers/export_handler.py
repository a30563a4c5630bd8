"""
handlers/export_handler.py
---------------------------
Handles data export commands (CSV, Excel).
Delegates to ExportService.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import get_service
from security.auth import authorized_only
from services.export_service import ExportService
from utils.logger import get_logger

logger = get_logger(__name__)
export_service = ExportService()


@authorized_only
async def export_csv_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export_csv - send every subscription as a CSV file."""
    service = get_service(context)
    records = service.current_records()
    today = service.clock()

    try:
        buffer = export_service.export_csv(records, today)
    except (ValueError, OSError) as e:
        logger.error(f"CSV export failed: {e}")
        await update.message.reply_text("❌ Export failed. Please try again.")
        return

    await update.message.reply_document(
        document=buffer,
        filename=f"subscriptions_{today.isoformat()}.csv",
        caption=f"📄 {len(records)} subscriptions - CSV",
    )


@authorized_only
async def export_excel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export_excel - send every subscription as an Excel workbook."""
    service = get_service(context)
    records = service.current_records()
    today = service.clock()

    try:
        buffer = export_service.export_excel(records, today)
    except (ValueError, OSError) as e:
        logger.error(f"Excel export failed: {e}")
        await update.message.reply_text("❌ Export failed. Please try again.")
        return

    await update.message.reply_document(
        document=buffer,
        filename=f"subscriptions_{today.isoformat()}.xlsx",
        caption=f"📊 {len(records)} subscriptions - Excel",
    )
