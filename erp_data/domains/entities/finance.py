"""
Finance module entities: transactions, accounts, received payments.
"""

from __future__ import annotations

from erp_data.domains.entities.common import (
    ACCOUNT_TYPE,
    CURRENCY,
    PAYMENT_METHOD,
    copy_field,
    id_rule,
    numbered,
    timestamp_rules,
    today,
)
from erp_data.domains.entities.schema import EntitySchema
from erp_data.domains.records.coercion import (
    EnumField,
    optional_number,
    to_bool,
    to_date,
    to_text,
    to_text_list,
)
from erp_data.domains.records.mapping import passthrough, rule

TRANSACTION_TYPE = EnumField(
    ("INCOME", "EXPENSE", "TRANSFER"),
    default="EXPENSE",
    aliases={"CREDIT": "INCOME", "REVENUE": "INCOME", "IN": "INCOME", "DEBIT": "EXPENSE", "COST": "EXPENSE", "OUT": "EXPENSE"},
)

TRANSACTION_STATUS = EnumField(
    ("DRAFT", "PENDING", "APPROVED", "POSTED", "RECONCILED", "VOID", "REJECTED"),
    default="DRAFT",
    aliases={"COMPLETED": "POSTED", "CLEARED": "RECONCILED", "CANCELLED": "VOID", "VOIDED": "VOID"},
)

PAYMENT_STATUS = EnumField(
    ("PENDING", "RECEIVED", "CLEARED", "BOUNCED", "REFUNDED"),
    default="PENDING",
    aliases={"PAID": "RECEIVED", "COMPLETED": "CLEARED", "FAILED": "BOUNCED", "RETURNED": "BOUNCED"},
)

TRANSACTIONS = EntitySchema(
    key="transactions",
    module="finance",
    id_prefix="tx",
    remote_path="/finance/transactions",
    list_query="?limit=1000&page=1",
    collection_key="transactions",
    record_key="transaction",
    table="finance_transactions",
    required=frozenset({"id", "transaction_number", "date", "type", "status", "account", "amount", "currency"}),
    rules=(
        id_rule("tx", "transaction_id"),
        rule("transaction_number", "number", "reference", default=numbered("TXN", "tx")),
        rule("date", "transaction_date", "posted_date", "created_at", default=today, coerce=to_date),
        rule("type", "transaction_type", "transaction_direction", "direction", default="EXPENSE", coerce=TRANSACTION_TYPE),
        rule("status", "transaction_status", default="DRAFT", coerce=TRANSACTION_STATUS),
        rule("account", "account.account_name", "account.name", "account_name", "source_account_name", default="", coerce=to_text),
        rule("account_type", "account.account_type", coerce=ACCOUNT_TYPE),
        rule("amount", "transaction_amount", "total", default=0, coerce=optional_number),
        rule("currency", "currency_code", default="USD", coerce=CURRENCY),
        rule("payment_method", "method", coerce=PAYMENT_METHOD),
        rule("reference_number", "reference_no", coerce=to_text),
        rule("party_name", "counterparty_name", "party.name", coerce=to_text),
        rule("category", "category_name", "category.name", coerce=to_text),
        rule("description", "transaction_title", "transaction_description", coerce=to_text),
        rule("notes", "transaction_notes", coerce=to_text),
        rule("due_date", coerce=to_date),
        rule("tax_amount", coerce=optional_number),
        rule("tags", coerce=to_text_list),
        *timestamp_rules("date", "transaction_date"),
    ),
    wire_rules=passthrough(
        "transaction_number",
        "date",
        "type",
        "status",
        "account",
        "account_type",
        "amount",
        "currency",
        "payment_method",
        "reference_number",
        "party_name",
        "category",
        "description",
        "notes",
        "due_date",
        "tax_amount",
        "tags",
    ),
    seed=(
        {
            "id": "tx-1",
            "transaction_number": "TXN-1",
            "date": "2025-01-05",
            "type": "INCOME",
            "account": "4000 - Product revenue",
            "amount": 12500,
            "currency": "USD",
            "status": "POSTED",
            "notes": "January SaaS subscriptions",
            "created_at": "2025-01-05",
        },
        {
            "id": "tx-2",
            "transaction_number": "TXN-2",
            "date": "2025-01-06",
            "type": "EXPENSE",
            "account": "6000 - Cloud hosting",
            "amount": 2100,
            "currency": "USD",
            "status": "POSTED",
            "notes": "Hosting and infrastructure",
            "created_at": "2025-01-06",
        },
    ),
)

ACCOUNTS = EntitySchema(
    key="accounts",
    module="finance",
    id_prefix="acc",
    remote_path="/finance/accounts",
    collection_key="accounts",
    record_key="account",
    table="finance_accounts",
    required=frozenset(
        {"id", "account_number", "account_name", "account_type", "currency", "opening_balance", "current_balance", "is_active"}
    ),
    rules=(
        id_rule("acc", "account_id"),
        rule("account_number", "number", "code", default=numbered("ACC", "acc")),
        rule("account_name", "name", default="", coerce=to_text),
        rule("account_type", "type", default="ASSET", coerce=ACCOUNT_TYPE),
        rule("currency", "currency_code", default="USD", coerce=CURRENCY),
        rule("opening_balance", "initial_balance", default=0, coerce=optional_number),
        rule("current_balance", "balance", default=copy_field("opening_balance", 0), coerce=optional_number),
        rule("available_balance", coerce=optional_number),
        rule("bank_name", "bank.name", coerce=to_text),
        rule("branch_name", "bank.branch", coerce=to_text),
        rule("ifsc_code", coerce=to_text),
        rule("swift_code", coerce=to_text),
        rule("account_holder_name", "holder_name", coerce=to_text),
        rule("is_active", "active", "status", default=True, coerce=to_bool),
        rule("is_default", coerce=to_bool),
        rule("description", coerce=to_text),
        rule("notes", coerce=to_text),
        *timestamp_rules(),
    ),
    wire_rules=passthrough(
        "account_number",
        "account_name",
        "account_type",
        "currency",
        "opening_balance",
        "current_balance",
        "available_balance",
        "bank_name",
        "branch_name",
        "ifsc_code",
        "swift_code",
        "account_holder_name",
        "is_active",
        "is_default",
        "description",
        "notes",
    ),
    seed=(
        {
            "id": "acc-1",
            "account_number": "1000",
            "account_name": "Operating account",
            "account_type": "ASSET",
            "currency": "USD",
            "opening_balance": 50000,
            "current_balance": 60400,
            "bank_name": "First National",
            "is_active": True,
            "is_default": True,
            "created_at": "2025-01-01",
        },
        {
            "id": "acc-2",
            "account_number": "2000",
            "account_name": "Accounts payable",
            "account_type": "LIABILITY",
            "currency": "USD",
            "opening_balance": 0,
            "current_balance": 2100,
            "is_active": True,
            "created_at": "2025-01-01",
        },
    ),
)

PAYMENTS = EntitySchema(
    key="payments",
    module="finance",
    id_prefix="pay",
    remote_path="/finance/received-payments",
    list_query="?limit=1000&page=1",
    collection_key="payments",
    record_key="payment",
    table="received_payments",
    required=frozenset(
        {"id", "payment_number", "payment_date", "customer_name", "amount", "currency", "payment_method", "account", "status"}
    ),
    rules=(
        id_rule("pay", "payment_id"),
        rule("payment_number", "number", default=numbered("PAY", "pay")),
        rule("payment_date", "received_date", "date", "created_at", default=today, coerce=to_date),
        rule("customer_name", "customer.name", "customer.customer_name", "payer_name", default="", coerce=to_text),
        rule("customer_id", "customer.id", coerce=to_text),
        rule("invoice_number", "invoice.invoice_number", "invoice.number", coerce=to_text),
        rule("invoice_id", "invoice.id", coerce=to_text),
        rule("amount", "amount_received", "total", default=0, coerce=optional_number),
        rule("currency", "currency_code", default="USD", coerce=CURRENCY),
        rule("payment_method", "method", default="OTHER", coerce=PAYMENT_METHOD),
        rule("reference_number", "reference", coerce=to_text),
        rule("transaction_id", coerce=to_text),
        rule("account", "account.account_name", "account.name", "deposit_account", default="", coerce=to_text),
        rule("status", "payment_status", default="PENDING", coerce=PAYMENT_STATUS),
        rule("received_by", coerce=to_text),
        rule("cleared_date", coerce=to_date),
        rule("notes", coerce=to_text),
        *timestamp_rules("payment_date"),
    ),
    wire_rules=passthrough(
        "payment_number",
        "payment_date",
        "customer_name",
        "customer_id",
        "invoice_number",
        "invoice_id",
        "amount",
        "currency",
        "payment_method",
        "reference_number",
        "transaction_id",
        "account",
        "status",
        "received_by",
        "cleared_date",
        "notes",
    ),
    seed=(
        {
            "id": "pay-1",
            "payment_number": "PAY-1001",
            "payment_date": "2025-01-07",
            "customer_name": "Acme Retail",
            "invoice_number": "INV-2025-001",
            "amount": 4800,
            "currency": "USD",
            "payment_method": "BANK_TRANSFER",
            "account": "Operating account",
            "status": "CLEARED",
            "created_at": "2025-01-07",
        },
        {
            "id": "pay-2",
            "payment_number": "PAY-1002",
            "payment_date": "2025-01-09",
            "customer_name": "Northwind Traders",
            "invoice_number": "INV-2025-004",
            "amount": 1250,
            "currency": "USD",
            "payment_method": "CHECK",
            "account": "Operating account",
            "status": "RECEIVED",
            "created_at": "2025-01-09",
        },
    ),
)
