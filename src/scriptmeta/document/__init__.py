"""Project document text format."""

from scriptmeta.document.codec import decode, encode, normalize_body
from scriptmeta.document.schema import FRONT_MATTER_SCHEMA, FieldSpec

__all__ = ["FRONT_MATTER_SCHEMA", "FieldSpec", "decode", "encode", "normalize_body"]
