import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./invoicing.db")
    AUTO_CREATE_TABLES = bool(data.get("AUTO_CREATE_TABLES", True))
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))

    # Document store paths
    ORDERS_PATH = data.get("ORDERS_PATH", "orders")
    SALES_ORDERS_PATH = data.get("SALES_ORDERS_PATH", "salesOrders")
    INVOICES_PATH = data.get("INVOICES_PATH", "invoices")
    CUSTOMERS_PATH = data.get("CUSTOMERS_PATH", "customers")
    COMPANY_PATH = data.get("COMPANY_PATH", "company")
    EXCHANGE_RATE_PATH = data.get("EXCHANGE_RATE_PATH", "settings/exchangeRates/usdToLkr")

    # Counters: namespace -> value handed out by the first reservation
    COUNTER_SEEDS = data.get(
        "COUNTER_SEEDS",
        {
            "invoiceCounter": 10000,
            "salesInvoiceCounter": 10000,
            "salesOrderCounter": 10000,
            "customerOrderCounter": 10004,
        },
    )
    COUNTER_MAX_RETRIES = data.get("COUNTER_MAX_RETRIES", 25)

    # Currency
    LOCAL_CURRENCY = data.get("LOCAL_CURRENCY", "LKR")
    LOCAL_CURRENCY_SYMBOL = data.get("LOCAL_CURRENCY_SYMBOL", "Rs.")
    DEFAULT_ITEM_CURRENCY = data.get("DEFAULT_ITEM_CURRENCY", "LKR")
    FOREIGN_CURRENCY_CODES = data.get("FOREIGN_CURRENCY_CODES", ["USD", "$"])

    # Invoicing
    ELIGIBLE_ORDER_STATUSES = data.get("ELIGIBLE_ORDER_STATUSES", ["confirmed", "ready"])
    INVOICE_TEMPLATE_MIN_ROWS = data.get("INVOICE_TEMPLATE_MIN_ROWS", 15)
    COMPANY_NAME = data.get("COMPANY_NAME", "Sevinro Distributors")
    COMPANY_ADDRESS = data.get("COMPANY_ADDRESS", "No : 138/A, Akaravita, Gampaha")
    COMPANY_PHONE = data.get("COMPANY_PHONE", "071 39 65 580, 0777 92 90 36")

    # Tabular import / schema inference
    ALLOWED_UPLOAD_EXTENSIONS = data.get("ALLOWED_UPLOAD_EXTENSIONS", [".csv", ".xlsx", ".xls"])
    IMPORT_DEFAULT_QUANTITY = data.get("IMPORT_DEFAULT_QUANTITY", 1)
    IMPORT_DEFAULT_DESCRIPTION = data.get("IMPORT_DEFAULT_DESCRIPTION", "")
    CLASSIFIER_API_URL = data.get(
        "CLASSIFIER_API_URL", "https://ai.gateway.lovable.dev/v1/chat/completions"
    )
    CLASSIFIER_API_KEY = data.get("CLASSIFIER_API_KEY", os.getenv("CLASSIFIER_API_KEY", ""))
    CLASSIFIER_MODEL = data.get("CLASSIFIER_MODEL", "google/gemini-2.5-flash")
    CLASSIFIER_TIMEOUT_SECONDS = data.get("CLASSIFIER_TIMEOUT_SECONDS", 60.0)

    # Invoice link reconciliation worker
    LINK_RECONCILIATION_ENABLED = bool(data.get("LINK_RECONCILIATION_ENABLED", True))
    LINK_RECONCILIATION_INTERVAL_SECONDS = data.get("LINK_RECONCILIATION_INTERVAL_SECONDS", 3600)
