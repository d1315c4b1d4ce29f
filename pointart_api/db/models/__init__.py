"""
ORM models for the inventory categories, sales ledgers, customers, invoices,
accounts and system tables (notifications, audit log, settings).

Importing this package ensures model classes are registered with the Base
metadata for Alembic and for the SQL data client, which resolves tables by name.
"""

from .inventory import (  # noqa: F401
    Stationery,
    GiftStoreItem,
    EmbroideryJob,
    MachineService,
    ArtService,
    ProductCategory,
)
from .sales import (  # noqa: F401
    StationerySale,
    GiftDailySale,
    Customer,
    Invoice,
    InvoiceItem,
)
from .security import (  # noqa: F401
    User,
    Profile,
    AuthSession,
)
from .system import (  # noqa: F401
    Notification,
    AuditLogEntry,
    AppSetting,
)
