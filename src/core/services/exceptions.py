class ServiceError(Exception):
    _msg = "unexpected service error"

    def __init__(self, msg: str | None = None) -> None:
        self._msg = msg or self._msg
        return super().__init__()

    def __str__(self):
        return self._msg


class ClientError(ServiceError):
    _msg = "client error"


class UnsupportedFileError(ClientError):
    _msg = "Invalid file type. Only JPEG, PNG, GIF, and WebP images are allowed."


class FileTooLargeError(ClientError):
    def __init__(self, max_size: int):
        super().__init__(f"File too large. Max allowed size is {max_size} bytes")


class InvalidCouponError(ClientError):
    _msg = "Invalid coupon code"


class ExternalGatewayError(ServiceError):
    _msg = "Gateway error. Please try again later"


class CommonServiceError(ServiceError):
    def _generate_msg(self) -> str:
        return self._msg

    def __init__(self, entity_name: str, **kwargs) -> None:
        self._entity_name = entity_name
        self._params = kwargs
        return super().__init__(self._generate_msg())


class EntityNotFoundError(CommonServiceError):
    def _generate_msg(self) -> str:
        msg = "%s %s not found"
        params_string = ""
        if self._params:
            params_string = "with " + ", ".join(
                f"{key}={value}" for key, value in self._params.items()
            )
        return msg % (self._entity_name, params_string)
