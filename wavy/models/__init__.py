# wavy/models/__init__.py

# This file imports all the models so they are registered on the SQLAlchemy Base.

from .user import User, Profile, UserRole
from .job import Job
from .training import Category, Training
from .lead import Application, TrainingLead, ContactMessage
from .client import Client, ClientValidator, UserClientAssignment
from .cra import CraReport, CraDayDetail
from .tokens import OtpCode, PasswordResetToken
from .invitation import UserInvitation
