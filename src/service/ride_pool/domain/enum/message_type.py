from enum import StrEnum


class MessageType(StrEnum):
    TEXT = 'text'
    IMAGE = 'image'
    LOCATION = 'location'
