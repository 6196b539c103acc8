from .httpx_utils import (
    log_response as log_response,
    log_request as log_request,
)
from .helpers import CustomJSONEncoder as CustomJSONEncoder
from .files import (
    save_upload_file as save_upload_file,
    filename_split as filename_split,
    sanitize_filename as sanitize_filename,
)
