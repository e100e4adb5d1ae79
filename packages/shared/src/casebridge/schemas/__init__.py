from .cases import CaseDetails, CasePatch, StoredFile
from .quotes import QuotePage, QuotePatch, QuoteTerms
from .users import SignUp

__all__ = [
    "CaseDetails",
    "CasePatch",
    "StoredFile",
    "QuotePage",
    "QuotePatch",
    "QuoteTerms",
    "SignUp",
]
