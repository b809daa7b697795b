"""Constants for the avroderive package."""

# Avro primitive keywords in the order union branches are rendered
PRIMITIVE_KINDS = ('boolean', 'double', 'int', 'long', 'null', 'string')

NUMERIC_KINDS = ('int', 'long', 'double')

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Top-level record name for single documents and for batch messages
DEFAULT_RECORD_NAME = 'record'
MESSAGE_RECORD_NAME = 'Record'

# Number of ranked schemas a strict batch returns
MAX_RANKED_SCHEMAS = 3

# Maximum nesting depth of a document (prevents runaway recursion)
MAX_DERIVATION_DEPTH = 100
