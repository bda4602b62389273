class ReportError(Exception):
    """Base error for the price comparison report."""


class MissingColumnsError(ReportError):
    """The purchase-line export lacks columns the report needs."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing required columns: {', '.join(missing)}")
