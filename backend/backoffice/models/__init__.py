from .statuses import (
    UserRole, ApprovalStatus, PaymentStatus, DeliveryStatus,
    LeadStatus, CartStatus, StockPool, MovementKind,
)
from .catalog import Region, Product, RegionStock, LogisticsPartner
from .ledger import StockMovement
from .orders import Order, OrderItem
from .leads import WebLead, WebLeadItem, AbandonedCart
from .auth import User

__all__ = [
    'UserRole', 'ApprovalStatus', 'PaymentStatus', 'DeliveryStatus',
    'LeadStatus', 'CartStatus', 'StockPool', 'MovementKind',
    'Region', 'Product', 'RegionStock', 'LogisticsPartner',
    'StockMovement',
    'Order', 'OrderItem',
    'WebLead', 'WebLeadItem', 'AbandonedCart',
    'User',
]
