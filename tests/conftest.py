"""Shared fixtures: introspection payload builders and an in-memory transport."""

import pytest


def named(name, kind="OBJECT"):
    return {"name": name, "kind": kind, "ofType": None}


def scalar_ref(name):
    return named(name, "SCALAR")


def non_null(of_type):
    return {"name": None, "kind": "NON_NULL", "ofType": of_type}


def list_of(of_type):
    return {"name": None, "kind": "LIST", "ofType": of_type}


def field(name, type_ref, args=None):
    return {"name": name, "type": type_ref, "args": args or []}


def object_type(name, fields, kind="OBJECT"):
    return {"name": name, "kind": kind, "fields": fields}


def leaf_type(name, kind="SCALAR"):
    return {"name": name, "kind": kind, "fields": None}


def introspection_payload(query_fields, types):
    """Wrap root fields and types the way `data` comes back from the API."""
    builtins = [leaf_type(n) for n in ("String", "Int", "Float", "Boolean", "ID", "Date", "DateTime")]
    return {
        "__schema": {
            "queryType": {"name": "Query", "fields": query_fields},
            "types": [object_type("Query", query_fields)] + types + builtins,
        }
    }


class FakeTransport:
    """Returns a canned payload (or raises) instead of calling the API."""

    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error
        self.url = "https://api.example.com/graphql"
        self.queries = []
        self.closed = False

    async def execute(self, query):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.data

    async def close(self):
        self.closed = True


@pytest.fixture
def widget_payload():
    """listWidgets { data: [Widget] } with Widget.parent pointing back to Widget."""
    widget = object_type("Widget", [
        field("id", non_null(scalar_ref("ID"))),
        field("name", scalar_ref("String")),
        field("parent", named("Widget")),
    ])
    page = object_type("WidgetPage", [
        field("data", list_of(named("Widget"))),
        field("totalCount", scalar_ref("Int")),
    ])
    return introspection_payload(
        [field("listWidgets", non_null(named("WidgetPage")), [field("params", named("PageParams", "INPUT_OBJECT"))])],
        [widget, page],
    )


@pytest.fixture
def invoice_payload():
    """An invoicing API with an envelope, a cycle, an enum and a direct query."""
    invoice = object_type("Invoice", [
        field("__typename", non_null(scalar_ref("String"))),
        field("id", non_null(scalar_ref("ID"))),
        field("number", scalar_ref("String")),
        field("status", non_null(named("InvoiceStatus", "ENUM"))),
        field("issueDate", scalar_ref("Date")),
        field("total", scalar_ref("Float")),
        field("tags", non_null(list_of(non_null(scalar_ref("String"))))),
        field("customer", named("Customer")),
        field("lines", non_null(list_of(non_null(named("InvoiceLine"))))),
    ])
    customer = object_type("Customer", [
        field("id", non_null(scalar_ref("ID"))),
        field("name", scalar_ref("String")),
        field("invoices", list_of(named("Invoice"))),
    ])
    line = object_type("InvoiceLine", [
        field("id", non_null(scalar_ref("ID"))),
        field("amount", scalar_ref("Float")),
    ])
    invoice_page = object_type("InvoicePage", [
        field("data", non_null(list_of(non_null(named("Invoice"))))),
        field("totalCount", scalar_ref("Int")),
        field("totalPages", scalar_ref("Int")),
    ])
    customer_page = object_type("CustomerPage", [
        field("data", list_of(named("Customer"))),
    ])
    status = leaf_type("InvoiceStatus", "ENUM")
    return introspection_payload(
        [
            field("listInvoices", non_null(named("InvoicePage"))),
            field("getInvoice", named("Invoice"), [field("id", non_null(scalar_ref("ID")))]),
            field("Listing", scalar_ref("String")),
            field("listCustomers", named("CustomerPage")),
            field("countInvoices", scalar_ref("Int")),
            field("listStatuses", list_of(named("InvoiceStatus", "ENUM"))),
        ],
        [invoice, customer, line, invoice_page, customer_page, status],
    )


@pytest.fixture
def widget_transport(widget_payload):
    return FakeTransport(widget_payload)


@pytest.fixture
def invoice_transport(invoice_payload):
    return FakeTransport(invoice_payload)
