from sqlalchemy import Enum as SAEnum


class CaseInsensitiveEnum(SAEnum):
    """Enum column that stores values and accepts any casing on the way in.

    Legacy rows written by the dashboard frontend occasionally carry
    ``"Confirmed"`` or ``"IN_PROGRESS"``; both resolve to the lower-case
    value stored in the column.
    """

    def __init__(self, enum_cls, **kwargs):
        self._enum_cls = enum_cls
        self._enum_kwargs = kwargs.copy()
        kwargs.setdefault("values_callable", lambda enum: [e.value for e in enum])
        super().__init__(enum_cls, **kwargs)

    def adapt(self, impltype, **kw):
        params = {**self._enum_kwargs, **kw}
        return CaseInsensitiveEnum(self._enum_cls, **params)

    def _normalize(self, value):
        if value is None:
            return None
        if isinstance(value, self._enum_cls):
            return value.value
        return str(value).strip().lower()

    def bind_processor(self, dialect):
        parent = super().bind_processor(dialect)

        def process(value):
            value = self._normalize(value)
            if parent and value is not None:
                return parent(value)
            return value

        return process

    def result_processor(self, dialect, coltype):
        parent = super().result_processor(dialect, coltype)

        def process(value):
            value = self._normalize(value)
            if parent and value is not None:
                return parent(value)
            return value

        return process
