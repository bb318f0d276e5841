from .assemble import assemble_response
from .assemble import assemble_response_head
from .read import read_response
from .read import read_response_head

__all__ = [
    "read_response",
    "read_response_head",
    "assemble_response",
    "assemble_response_head",
]
