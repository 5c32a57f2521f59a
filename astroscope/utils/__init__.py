from .text import (
    strip_markup,
    truncate,
    normalize_terms,
    tokenize_field,
)
