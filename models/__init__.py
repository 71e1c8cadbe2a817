from models.competency import Competency, CompetencyStatus, CompetencyDomain, AcademicLevel
from models.audit import AuditLog, AuditAction

__all__ = [
    'Competency', 'CompetencyStatus', 'CompetencyDomain', 'AcademicLevel',
    'AuditLog', 'AuditAction'
]
