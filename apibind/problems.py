from apibind.interface import Record

INTERNAL_ERROR_STATUS = 500
INTERNAL_ERROR_MESSAGE = "Internal Server Error"


class APIError(Exception):
    """
    An error that is safe to expose, its status and message are sent to the caller as is.

    Handlers can either return it or raise it:

    ```python
    async def get_order(ctx: Context, req: OrderQuery) -> tuple[Order, Exception | None]:
        order = await orders.find(req.order_id)
        if order is None:
            return None, APIError(404, "order not found")
        return order, None
    ```
    """

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(status={self.status}, message={self.message!r})"


class ErrorBody(Record):
    error: str


class Problem(Record):
    status: int
    message: str
    internal: bool = False

    def body(self) -> ErrorBody:
        return ErrorBody(error=self.message)


def unwrap(exc: BaseException) -> BaseException:
    """
    Follow `__cause__` to the root of the chain.

    `APIError` is terminal, `raise APIError(...) from exc` keeps its status.
    A cyclic chain stops at the last error not seen before.
    """
    seen: set[int] = {id(exc)}
    while not isinstance(exc, APIError):
        cause = exc.__cause__
        if cause is None or id(cause) in seen:
            break
        seen.add(id(cause))
        exc = cause
    return exc


def classify(exc: BaseException) -> Problem:
    root = unwrap(exc)
    if isinstance(root, APIError):
        return Problem(status=root.status, message=root.message)
    return Problem(
        status=INTERNAL_ERROR_STATUS, message=INTERNAL_ERROR_MESSAGE, internal=True
    )
