"""Element, attribute and capability names used in record XML documents."""

# Document structure
RESULT = "result"
SETUP = "setup"
ANSWERS = "answers"
EXTRACT_PREFIX = "extract"
ATTACHMENT_PREFIX = "att"

# Record fields
DATA = "data"
BIRTH_ORDER = "birthOrder"
BROKEN = "broken"
CLASSIFICATION = "classification"
CURRENT_FORM = "currentForm"
FILENAME = "filename"
FONT_ENCODING = "fontEncoding"
FOOTER = "footer"
HEADER = "header"
HEADER_ENCODING = "headerEncoding"
ID = "id"
NUM_CHILDREN = "numChildren"
NUM_SIBLINGS = "numSiblings"
OUTPUTABLE = "outputable"
PRIORITY = "priority"
PROCESSING_ERROR = "processingError"
TRANSACTION_ID = "transactionId"
WORK_BUNDLE_ID = "workBundleId"
META = "meta"
VIEW = "view"

# Children of keyed elements (meta, view)
NAME = "name"
VALUE = "value"

# Attributes
ENCODING_ATTRIBUTE = "encoding"
BASE64_ENCODING = "base64"
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
XML_SPACE_ATTRIBUTE = f"{{{XML_NAMESPACE}}}space"
PRESERVE = "preserve"

# Record capabilities invoked by the dispatch bridge
SET_CHANNEL_FACTORY = "set_channel_factory"
SET_BIRTH_ORDER = "set_birth_order"
SET_BROKEN = "set_broken"
SET_CLASSIFICATION = "set_classification"
PUSH_CURRENT_FORM = "push_current_form"
SET_FILENAME = "set_filename"
SET_FONT_ENCODING = "set_font_encoding"
SET_FOOTER = "set_footer"
SET_HEADER = "set_header"
SET_HEADER_ENCODING = "set_header_encoding"
SET_ID = "set_id"
SET_NUM_CHILDREN = "set_num_children"
SET_NUM_SIBLINGS = "set_num_siblings"
SET_OUTPUTABLE = "set_outputable"
SET_PRIORITY = "set_priority"
ADD_PROCESSING_ERROR = "add_processing_error"
SET_TRANSACTION_ID = "set_transaction_id"
SET_WORK_BUNDLE_ID = "set_work_bundle_id"
APPEND_PARAMETER = "append_parameter"
ADD_ALTERNATE_VIEW = "add_alternate_view"
