from .requisition import Requisition
from .requisition_log import RequisitionLog

__all__ = ['Requisition', 'RequisitionLog']
