"""Form validation and submission flow."""

from .base import EMAIL_PATTERN, Form, FormController, FormValidationError
from .tender import DOCUMENT_REQUIRED, TenderEditForm, TenderForm
from .member import EXPIRY_NOT_LATER, ExtendExpiryForm, MemberForm
from .reference import ReferenceForm
from .invoice import InvoiceForm
from .password import PasswordResetForm, generate_password

__all__ = [
    "EMAIL_PATTERN",
    "Form",
    "FormController",
    "FormValidationError",
    # Tenders
    "DOCUMENT_REQUIRED",
    "TenderEditForm",
    "TenderForm",
    # Subscribers
    "EXPIRY_NOT_LATER",
    "ExtendExpiryForm",
    "MemberForm",
    # Others
    "ReferenceForm",
    "InvoiceForm",
    "PasswordResetForm",
    "generate_password",
]
