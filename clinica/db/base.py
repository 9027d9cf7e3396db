# Garante o registro de TODAS as models no mesmo registry
from clinica.db.base_class import Base  # noqa
from clinica.models.appointment import Appointment  # noqa
from clinica.models.audit_log import AuditLog  # noqa
from clinica.models.client import Client  # noqa
from clinica.models.professional import (  # noqa
    Professional,
    ProfessionalMonthlyRealized,
    ProfessionalPublic,
)

# IMPORTS com efeito colateral (não remova)
from clinica.models.user import User  # noqa
