from ekusey.models.commission import (  # noqa: F401
    ClaimResult,
    CommissionStatus,
    CommissionView,
    MarkPaidResult,
)
