from .parser import SignatureParser as SignatureParser
from .parser import parse_signature as parse_signature
from .signature import FuncSignature as FuncSignature
