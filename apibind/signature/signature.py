from typing import Any

from apibind.interface import MISSING, InputShape, OutputShape, Record


class FuncSignature(Record, kw_only=True):
    """
    The calling convention of a bound function, computed once at bind time.

    The first argument is always the `Context` and is not reflected here.
    Arguments that follow come in this order: request, identity, input.
    """

    name: str
    input_shape: InputShape
    output_shape: OutputShape
    accepts_request: bool = False
    input_type: Any = MISSING
    output_type: Any = MISSING

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}<{self.name}: "
            f"{self.input_shape} -> {self.output_shape}>"
        )

    @property
    def accepts_identity(self) -> bool:
        return self.input_shape in ("identity", "identity_input")

    @property
    def accepts_input(self) -> bool:
        return self.input_shape in ("input", "identity_input")

    @property
    def produces_output(self) -> bool:
        return self.output_shape == "value_error"

    @property
    def produces_error(self) -> bool:
        return self.output_shape != "nothing"

    @property
    def arity(self) -> int:
        "number of positional arguments the function is called with"
        return (
            1
            + self.accepts_request
            + self.accepts_identity
            + self.accepts_input
        )
