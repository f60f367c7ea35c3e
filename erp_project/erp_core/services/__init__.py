from .catalog import archive_product, create_product, list_products, update_product
from .dashboard import get_dashboard_counts, recent_sales_orders
from .documents import apply_product_defaults, change_line_product
from .inventory import adjust_stock, low_stock_report, replay_stock
from .ledger import (account_balance, list_journal_entries, post_journal_entry,
                     reverse_journal_entry, trial_balance)
from .numbering import next_number
from .partners import archive_partner, create_partner, list_partners, update_partner
from .payroll import (cancel_payroll_run, confirm_payroll_run, create_payroll_run,
                      generate_lines, pay_payroll_run)
from .purchasing import (cancel_purchase_order, confirm_purchase_order,
                         create_purchase_order, create_vendor_invoice,
                         mark_vendor_invoice_paid, mark_vendor_invoice_received,
                         receive_purchase_order)
from .sales import (cancel_invoice, cancel_sales_order, confirm_sales_order,
                    create_delivery, create_invoice, create_sales_order,
                    issue_invoice, mark_invoice_paid, ship_delivery)
