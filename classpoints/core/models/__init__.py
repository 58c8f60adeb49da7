from classpoints.core.models.profile import Profile
from classpoints.core.models.class_model import SchoolClass
from classpoints.core.models.group import StudentGroup
from classpoints.core.models.student import Student
from classpoints.core.models.activation_code import ActivationCode
from classpoints.core.models.admin_settings import ADMIN_SETTINGS_ID, AdminSettings
