from .account import Account, AccountBalance
from .auditlog import AuditLog
from .invoice import Invoice, InvoiceLine
from .journal import JournalEntry, JournalLine
from .partner import BusinessPartner, PartnerType
from .payroll import PayrollLine, PayrollRun
from .product import Product
from .purchasing import (PurchaseOrder, PurchaseOrderLine, VendorInvoice,
                         VendorInvoiceLine)
from .sales import Delivery, DeliveryLine, SalesOrder, SalesOrderLine
from .sequence import DocumentSequence
from .stock import StockMovement
