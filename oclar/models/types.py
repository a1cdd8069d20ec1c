from typing import Optional

from pydantic import TypeAdapter
from sqlalchemy.types import JSON, TypeDecorator

from oclar.schemas import OrderLine, ProcessorAddress


class ValidatedJSON(TypeDecorator):
    """JSON column decoded into typed values on read and validated on write.

    Subclasses set ``schema`` to the pydantic type of the stored value.
    """
    impl = JSON
    cache_ok = True
    schema = None

    @classmethod
    def adapter(cls):
        if '_adapter' not in cls.__dict__:
            cls._adapter = TypeAdapter(cls.schema)
        return cls._adapter

    @classmethod
    def encode(cls, value):
        adapter = cls.adapter()
        return adapter.dump_python(adapter.validate_python(value), mode='json')

    @classmethod
    def decode(cls, value):
        return cls.adapter().validate_python(value)

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return self.encode(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self.decode(value)


class OrderLines(ValidatedJSON):
    schema = list[OrderLine]


class StringList(ValidatedJSON):
    schema = list[str]


class ShippingAddressJSON(ValidatedJSON):
    schema = Optional[ProcessorAddress]
