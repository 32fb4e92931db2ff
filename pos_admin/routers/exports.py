import csv
from io import BytesIO, StringIO

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from sqlalchemy.orm import Session, joinedload

from pos_admin.database import get_db
from pos_admin.core.auth import get_current_user
from pos_admin.core.rate_limiter import limiter
from pos_admin.models.sales import Sale
from pos_admin.routers.reports import product_sales

router = APIRouter(prefix="/api/reports/export", tags=["Exports"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

SALES_HEADERS = ["Sale ID", "Total Amount", "Payment Method", "Date", "User"]
PRODUCTS_HEADERS = ["Product ID", "Name", "Price", "Stock", "Category", "Total Sold"]

# =========================================================
# ROW BUILDERS
# =========================================================
def _sales_rows(db: Session):
    sales = (
        db.query(Sale)
        .options(joinedload(Sale.user))
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .all()
    )

    for sale in sales:
        yield [
            sale.id,
            sale.total_amount,
            sale.payment_method,
            sale.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            sale.user_name or "",
        ]


def _product_rows(db: Session):
    for row in product_sales(db, order_by_sold=False):
        yield [
            row.id,
            row.name,
            row.price,
            row.stock,
            row.category_name or "",
            row.total_sold,
        ]


def _export_table(db: Session, export_type: str):
    if export_type == "sales":
        return SALES_HEADERS, list(_sales_rows(db))
    return PRODUCTS_HEADERS, list(_product_rows(db))


def _attachment(output, media_type: str, filename: str):
    return StreamingResponse(
        output,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# =========================================================
# EXPORT ROUTES
# =========================================================
@router.get("/csv")
@limiter.limit("10/minute")
def export_csv(
    request: Request,
    export_type: str = Query("sales", alias="type", pattern="^(sales|products)$"),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    headers, rows = _export_table(db, export_type)

    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    writer.writerows(rows)

    output = BytesIO(buffer.getvalue().encode("utf-8"))
    return _attachment(output, "text/csv", f"{export_type}_report.csv")


@router.get("/xlsx")
@limiter.limit("10/minute")
def export_xlsx(
    request: Request,
    export_type: str = Query("sales", alias="type", pattern="^(sales|products)$"),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    headers, rows = _export_table(db, export_type)

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Report"

    sheet.append(headers)
    for row in rows:
        sheet.append(row)

    output = BytesIO()
    workbook.save(output)
    output.seek(0)

    return _attachment(output, XLSX_MEDIA_TYPE, f"{export_type}_report.xlsx")
