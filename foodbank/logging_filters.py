class RequestIDLogFilter:
    """Guarantee a `request_id` attribute so the console format never KeyErrors."""

    def filter(self, record):
        if not getattr(record, "request_id", None):
            record.request_id = "-"
        return True
