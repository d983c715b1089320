from intake.services.json_body.decoder import (  # noqa: F401
    BoundedReader,
    classify_decode_error,
    decode_json,
    find_unknown_field,
    read_json,
)
from intake.services.json_body.errors import (  # noqa: F401
    JsonBadSyntax,
    JsonEmptyBody,
    JsonError,
    JsonMalformedTarget,
    JsonMultipleDocuments,
    JsonOtherError,
    JsonTooLarge,
    JsonTruncatedBody,
    JsonTypeMismatch,
    JsonUnknownField,
)
