"""Cin7 sales-order field name constants."""

# Identity. Older API versions used the capitalized variants.
ID = "id"
REFERENCE = "reference"
ORDER_ID_FIELDS = ("id", "Id", "OrderId", "SalesOrderId", "OrderNumber", "reference")

# Dates & status
INVOICE_DATE = "invoiceDate"
STAGE = "stage"

# Delivery address
DELIVERY_FIRST_NAME = "deliveryFirstName"
DELIVERY_LAST_NAME = "deliveryLastName"
DELIVERY_COMPANY = "deliveryCompany"
DELIVERY_ADDRESS_1 = "deliveryAddress1"
DELIVERY_ADDRESS_2 = "deliveryAddress2"
DELIVERY_CITY = "deliveryCity"
DELIVERY_STATE = "deliveryState"
DELIVERY_POSTAL_CODE = "deliveryPostalCode"
DELIVERY_COUNTRY = "deliveryCountry"

# Billing
BILLING_COMPANY = "billingCompany"

# Totals
FREIGHT_TOTAL = "freightTotal"
PRODUCT_TOTAL = "productTotal"
TOTAL = "total"
TOTAL_FIELDS = (
    "total",
    "Total",
    "orderTotal",
    "OrderTotal",
    "totalAmount",
    "TotalAmount",
    "productTotal",
    "ProductTotal",
)

# Fields requested from the listing endpoint
DEFAULT_FIELDS = (
    ID,
    REFERENCE,
    INVOICE_DATE,
    STAGE,
    DELIVERY_FIRST_NAME,
    DELIVERY_LAST_NAME,
    DELIVERY_COMPANY,
    DELIVERY_ADDRESS_1,
    DELIVERY_ADDRESS_2,
    DELIVERY_CITY,
    DELIVERY_STATE,
    DELIVERY_POSTAL_CODE,
    DELIVERY_COUNTRY,
    BILLING_COMPANY,
    FREIGHT_TOTAL,
    PRODUCT_TOTAL,
    TOTAL,
)

# Listing responses are either a bare list or wrapped in one of these keys
RESULT_KEYS = ("items", "results")
