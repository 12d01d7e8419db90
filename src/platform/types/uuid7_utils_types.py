"""
Pydantic integration for uuid_utils.UUID.

Ride, booking and message ids are UUID7 values generated with uuid_utils. pydantic does not
know that type, so request/response schemas use `UtilsUUID7` instead:

- JSON input: string -> uuid_utils.UUID
- Python input: uuid_utils.UUID, stdlib uuid.UUID or string
- Output: always the canonical string form
- OpenAPI: `{"type": "string", "format": "uuid"}`
"""

from typing import Any
import uuid

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from uuid_utils import UUID


def to_utils_uuid(value: Any) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except Exception as e:
        raise ValueError(f'Invalid UUID: {value}') from e


class UtilsUUID7(UUID):
    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        from_str = core_schema.chain_schema(
            [
                core_schema.str_schema(),
                core_schema.no_info_plain_validator_function(to_utils_uuid),
            ]
        )
        return core_schema.json_or_python_schema(
            # The JSON schema must stay convertible for OpenAPI, so no plain validator at the top
            json_schema=from_str,
            python_schema=core_schema.union_schema(
                [
                    core_schema.is_instance_schema(UUID),
                    core_schema.chain_schema(
                        [
                            core_schema.is_instance_schema(uuid.UUID),
                            core_schema.no_info_plain_validator_function(to_utils_uuid),
                        ]
                    ),
                    from_str,
                ]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                str,
                when_used='always',
                return_schema=core_schema.str_schema(),
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        return {'type': 'string', 'format': 'uuid'}
