"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class InvalidTransitionError(DomainError):
    """Order status change not allowed from the current state."""


class PlanLimitError(DomainError):
    """Operation would exceed the product limit of the current plan."""


def product_not_found(product_id: str) -> str:
    """Return message for missing product."""
    return f"Product {product_id} not found"


def folder_not_found(folder_id: str) -> str:
    """Return message for missing folder."""
    return f"Folder {folder_id} not found"


def category_not_found(category_id: str) -> str:
    """Return message for missing category."""
    return f"Category {category_id} not found"


def order_not_found(order_id: str) -> str:
    """Return message for missing order."""
    return f"Order {order_id} not found"


def unknown_fields(entity: str, fields: set[str]) -> str:
    """Return message for updates naming fields the entity does not have."""
    return f"Unknown {entity} field{'s' if len(fields) != 1 else ''}: {', '.join(sorted(fields))}"


def plan_limit_exceeded(plan: str, limit: int, current: int, incoming: int) -> str:
    """Return message when an import would exceed the plan limit."""
    return (
        f"Importing {incoming} item{'s' if incoming != 1 else ''} would exceed the "
        f"{limit} item limit of the {plan} plan ({current} already stored). "
        "Please upgrade your plan."
    )
