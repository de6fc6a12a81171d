"""Table names, enumerated values and column lists shared by the SQL layer"""

USERS_TABLE = "Users"
PROPERTIES_TABLE = "Properties"

ACCOUNT_TYPES = ("tenant", "landlord", "technician", "admin")
PROPERTY_STATUSES = ("pending", "approved", "rejected", "forwarded_to_council")
PAYMENT_STATUSES = ("pending", "paid", "failed")

# Never includes "password"
PUBLIC_ACCOUNT_COLUMNS = (
    "id",
    "username",
    "fullName",
    "email",
    "phoneNumber",
    "accountType",
    "isActive",
    "lastLogin",
    "createdAt",
)

ACCOUNT_UPDATABLE_COLUMNS = ("fullName", "email", "phoneNumber", "accountType")

PROPERTY_UPDATABLE_COLUMNS = (
    "title",
    "description",
    "location",
    "price",
    "propertyType",
    "bedrooms",
    "bathrooms",
    "area",
    "picture",
    "video",
    "verificationDocument",
    "status",
)

PAYMENT_UPDATABLE_COLUMNS = ("paymentStatus", "paymentMethod")


def column_list(columns, alias: str = "") -> str:
    prefix = f"{alias}." if alias else ""
    return ", ".join(f'{prefix}"{column}"' for column in columns)


def sql_in_list(values) -> str:
    return ", ".join(f"'{value}'" for value in values)
