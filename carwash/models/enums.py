from enum import Enum


class WashType(str, Enum):
    INNER = "INNER"
    OUTER = "OUTER"
    FULL = "FULL"
    FREE = "FREE"


class PaymentType(str, Enum):
    CASH = "CASH"
    INSTAPAY = "INSTAPAY"


class RecordStatus(str, Enum):
    """
    Lifecycle of a wash record.
    IN_PROGRESS is the only state that can transition; the other two are terminal.
    """
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED = "FINISHED"
    CANCELLED = "CANCELLED"


class WorkerRole(str, Enum):
    CARWASH = "CARWASH"
    MECHANIC = "MECHANIC"
    BOTH = "BOTH"


class MechanicCategory(str, Enum):
    OIL_SERVICE = "OIL_SERVICE"
    OTHER_SERVICE = "OTHER_SERVICE"


class OilType(str, Enum):
    SHELL_4L = "SHELL_4L"
    SHELL_5L = "SHELL_5L"
    CUSTOMER_OWN = "CUSTOMER_OWN"


class MechanicServiceType(str, Enum):
    OIL_ONLY = "OIL_ONLY"
    OIL_AND_FILTER = "OIL_AND_FILTER"


# List price per wash type, used as the intake default
WASH_PRICES = {
    WashType.INNER: 90,
    WashType.OUTER: 90,
    WashType.FULL: 170,
    WashType.FREE: 0,
}
