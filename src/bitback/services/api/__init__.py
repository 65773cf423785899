"""HTTP service issuing keys.

See Also:
    [Api][bitback.services.api.service.Api]: The service class.
    [ApiConfig][bitback.services.api.configs.ApiConfig]: Service configuration.
"""

from .configs import ApiConfig
from .service import Api


__all__ = ["Api", "ApiConfig"]
