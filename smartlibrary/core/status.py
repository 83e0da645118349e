from smartlibrary.core.models import StatusEnum


class StatusPolicy:
    """Derives an item's availability label. Nothing else may set it."""

    @staticmethod
    def for_borrow(new_stock: int) -> StatusEnum:
        return StatusEnum.AVAILABLE if new_stock > 0 else StatusEnum.BORROWED

    @staticmethod
    def for_return(new_stock: int, active_loans: int) -> StatusEnum:
        """Status after a copy comes back.

        XXX Unlike `for_borrow`, outstanding loans also count towards
        AVAILABLE here, so an item with no shelf copies but other loans
        reads as AVAILABLE. Kept as-is until the catalog owners confirm
        which reading is intended.
        """
        if new_stock > 0 or active_loans > 0:
            return StatusEnum.AVAILABLE
        return StatusEnum.BORROWED

    initial = for_borrow
