from decimal import Decimal, InvalidOperation

from django import template

register = template.Library()


def format_currency(value) -> str:
    """350000 -> '$350,000.00'; negative amounts keep the sign in front."""
    if value is None or value == '':
        return ''
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return str(value)
    sign = '-' if amount < 0 else ''
    return f"{sign}${abs(amount):,.2f}"


@register.filter
def currency(value):
    return format_currency(value)
