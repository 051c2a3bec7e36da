"""
WhatsApp reply text for every intent.

Plain functions returning chat-formatted strings (``*bold*``, ``_italic_``,
emoji bullets). Restaurant identity and currency are passed in by the
message handler from configuration, never hardcoded here.
"""

import re
from typing import Optional
from urllib.parse import quote

from whatsorder.schemas.menu_schema import MenuItem
from whatsorder.schemas.order_schema import DailyStats, OrderFilter, OrderRecord, PaymentStatus
from whatsorder.tools.menu_catalog import MenuChangeResult

DEFAULT_CURRENCY = "₹"

QR_CODE_ENDPOINT = "https://api.qrserver.com/v1/create-qr-code/?size=300x300&data="

PAYMENT_STATUS_EMOJIS = {
    PaymentStatus.PENDING: "⏳",
    PaymentStatus.PAID: "✅",
    PaymentStatus.COD: "🚚",
    PaymentStatus.FAILED: "❌",
}

PAYMENT_METHOD_NAMES = {
    "cod": "Cash on Delivery",
    "upi": "UPI Payment",
    "card": "Card Payment",
    "bank_transfer": "Bank Transfer",
    "wallet": "Digital Wallet",
}

_CURRENT_LOCATION_RE = re.compile(r"Current: ([^(]+)")


def format_amount(amount: float, currency: str = DEFAULT_CURRENCY, decimals: int = 2) -> str:
    return f"{currency}{amount:.{decimals}f}"


def plain_number(value: float) -> str:
    """Up to two decimals, trailing zeros dropped, never scientific notation."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_price(price: float, currency: str = DEFAULT_CURRENCY) -> str:
    """Menu prices drop a trailing .0: 299.0 -> ₹299, 12.5 -> ₹12.5."""
    return f"{currency}{plain_number(price)}"


def delivery_address(current_location: Optional[str], home_location: Optional[str]) -> str:
    """Address stored on an order, e.g. ``Current: Office (Home: 12 MG Road)``."""
    if current_location and home_location:
        return f"Current: {current_location} (Home: {home_location})"
    if current_location:
        return f"Current: {current_location}"
    return home_location or ""


# ---------------------------------------------------------------------- #
# Onboarding
# ---------------------------------------------------------------------- #

def welcome_message(restaurant_name: str) -> str:
    return (
        f"👋 *Welcome to {restaurant_name}!*\n\n"
        "🙏 To get started, could you please tell me your name?\n\n"
        "💡 Just type your name and I'll remember it for future orders!"
    )


def name_confirmation(name: str) -> str:
    return (
        f"✅ Nice to meet you, {name}!\n\n"
        "📍 *Now, could you please share your location?*\n\n"
        "📝 Just type your address or area name "
        '(e.g., "MG Road, Bangalore" or "Sector 15, Gurgaon")'
    )


def location_request(name: Optional[str] = None) -> str:
    greeting = f"📍 Hi {name}! Could you please share your location?" if name else (
        "📍 Could you please share your location?"
    )
    return (
        f"{greeting}\n\n"
        "💡 It helps us estimate delivery time and confirm your delivery area.\n\n"
        "📝 Just type your address or area name"
    )


def location_confirmation(name: str, location: str, restaurant_name: str) -> str:
    return (
        f"📍 Perfect! We've saved your location: *{location}*\n\n"
        f"🎉 *Welcome to {restaurant_name}, {name}!*\n\n"
        "🍽️ *Here's how to order:*\n"
        "• Type 'menu' - See our full menu\n"
        "• Type 'order [quantity] [item name]' - Place an order\n"
        '• Example: "order 2 chicken biryani"\n'
        "• Type 'status' - Check your order status\n"
        "• Type 'search chicken' - Find chicken items\n\n"
        "🚀 Ready to order? Type 'menu' to see what's available!"
    )


def current_location_request(name: Optional[str], restaurant_name: str) -> str:
    if not name:
        return (
            "📍 Where are you right now?\n\n"
            "📝 Please share your current location to continue"
        )
    return (
        f"👋 Hi {name}! Welcome back to {restaurant_name}!\n\n"
        "📍 *Where are you right now?*\n\n"
        "🚚 This helps us calculate an accurate delivery time.\n\n"
        '💡 Example: "Office at Cyber City" or "Home in Koramangala"'
    )


def current_location_confirmation(name: str, current_location: str) -> str:
    return (
        f"📍 Got it, {name}! You're currently at: *{current_location}*\n\n"
        "🍽️ *Ready to order!*\n"
        "• Type 'menu' - See our menu\n"
        "• Type 'order [quantity] [item name]' - Place an order\n"
        "• Type 'help' - Get help"
    )


# ---------------------------------------------------------------------- #
# Menu, search and orders
# ---------------------------------------------------------------------- #

def menu_greeting(name: str, current_location: Optional[str], home_location: Optional[str]) -> str:
    """Header shown above the menu for a customer we already know."""
    if current_location:
        location_text = f" 📍 Currently at: {current_location}"
    elif home_location:
        location_text = f" 📍 {home_location}"
    else:
        location_text = ""
    return f"👋 Hi {name}!{location_text}\n🍽️ Here's our menu:\n\n"


def menu_message(
    restaurant_name: str,
    menu_date: str,
    groups: dict[str, list[MenuItem]],
    currency: str = DEFAULT_CURRENCY,
) -> str:
    """Full menu grouped by category, unavailable dishes marked with ❌."""
    if not any(groups.values()):
        return "🚫 Sorry, no items are available today."

    lines = [f"🍽️ *{restaurant_name} - Today's Menu*", f"📅 Date: {menu_date}", ""]
    for category, items in groups.items():
        lines.append(f"*{category}* 🍴")
        for item in items:
            status = "✅" if item.available else "❌"
            lines.append(
                f"{item.emoji} *{item.id}. {item.name}* - {format_price(item.price, currency)} {status}"
            )
            lines.append(f"   _{item.description}_")
            lines.append("")

    lines += [
        "📱 *How to order:*",
        "Type: 'Order [quantity] [item name]'",
        "Example: 'Order 2 Chicken Biryani'",
        "",
        "💡 You can also use item numbers!",
        "Example: 'Order 1 item 1' or 'Order 2 #1'",
    ]
    return "\n".join(lines)


def search_results(results: list[MenuItem], term: str, currency: str = DEFAULT_CURRENCY) -> str:
    if not results:
        return (
            f'🔍 No items found for "{term}".\n\n'
            "💡 Try a different keyword or type 'menu' to see all available items."
        )
    lines = [f'🔍 *Search Results for "{term}":*', ""]
    for item in results:
        lines.append(f"{item.emoji} *{item.id}. {item.name}* - {format_price(item.price, currency)}")
        lines.append(f"   _{item.description}_")
        lines.append("")
    lines.append("📱 To order any item, type: 'Order [quantity] [item name]'")
    return "\n".join(lines)


def order_success(order: OrderRecord, currency: str = DEFAULT_CURRENCY, dropped_segments: int = 0) -> str:
    lines = ["✅ Order placed successfully!", "", f"📋 Order ID: *{order.order_id}*"]
    for item in order.items:
        lines.append(f"• {item.quantity}x {item.name} - {format_amount(item.line_total, currency)}")
    lines += [f"💰 Total: {format_amount(order.total_amount, currency)}", ""]
    if dropped_segments:
        noun = "item" if dropped_segments == 1 else "items"
        lines += [
            f"⚠️ {dropped_segments} {noun} in your message didn't match our menu and "
            "were left out. Type 'menu' to check the names.",
            "",
        ]
    lines += [
        "🕐 We'll notify you when your order is ready!",
        "",
        "💳 *Next Step: Choose Payment Method*",
        "",
        "Reply with one of these:",
        '🚚 "pay cod" - Cash on Delivery',
        '📱 "pay upi" - UPI Payment (instant)',
        "",
        '❓ Need help? Type "payment help"',
    ]
    return "\n".join(lines)


def invalid_order() -> str:
    return (
        "❌ I didn't understand your order format. Please try:\n"
        "• 'Order 2 Chicken Biryani'\n"
        "• 'Order 1 item 3'\n"
        "• 'Order 3 #1'"
    )


def no_recent_orders() -> str:
    return (
        "📋 You don't have any recent orders.\n\n"
        "🍽️ Type 'menu' to see our delicious offerings and place your first order!"
    )


def recent_orders(orders: list[OrderRecord], currency: str = DEFAULT_CURRENCY) -> str:
    if not orders:
        return no_recent_orders()
    lines = ["📋 *Your Recent Orders:*", ""]
    for index, order in enumerate(orders, start=1):
        lines += [
            f"{index}. Order #{order.order_id}",
            f"   📅 {order.order_date:%d %b %Y}",
            f"   💰 {format_amount(order.total_amount, currency)}",
            f"   📊 Status: {order.status.value.upper()}",
            "",
        ]
    lines.append("💡 Need to place a new order? Type 'menu' to get started!")
    return "\n".join(lines)


def unknown_message(suggestions: list[str]) -> str:
    lines = [
        "🤔 I'm not sure I understand. Here's what you can do:",
        "",
        "📱 *Available Commands:*",
        "• 'menu' - View today's menu",
        "• 'order [quantity] [item name]' - Place an order",
        "• 'help' - Get detailed instructions",
        "• 'status' - Check your recent orders",
    ]
    if suggestions:
        lines += ["", "💡 *Suggestions:*"]
        lines += [f"• {s}" for s in suggestions]
    return "\n".join(lines)


def customer_help() -> str:
    return (
        "❓ *How to use our WhatsApp ordering system:*\n\n"
        "📋 *Commands:*\n"
        "• 'menu' or 'hi' - View today's menu\n"
        "• 'order [quantity] [item name]' - Place an order\n"
        "• 'order [quantity] item [number]' - Order by item number\n"
        "• 'search [keyword]' - Find dishes\n"
        "• 'status' - Check your recent orders\n"
        "• 'payment help' - Payment options\n\n"
        "📱 *Examples:*\n"
        '• "Order 2 Chicken Biryani"\n'
        '• "Order 2 Chicken Biryani, 1 Naan"\n'
        '• "Order 3 #1"'
    )


def returning_customer_help(name: str, location: Optional[str], total_orders: int) -> str:
    header = f"👋 Welcome back, {name}!"
    if location:
        header += f" 📍 {location}"
    if total_orders > 0:
        header += f"\n({total_orders} previous orders)"
    return (
        f"{header}\n\n"
        "🍽️ *Quick Commands:*\n"
        "• 'menu' - See today's menu\n"
        "• 'order [quantity] [item name]' - Place an order\n"
        "• 'status' - Check order status\n"
        "• 'payment help' - Payment options\n\n"
        "What would you like to do today?"
    )


def apology() -> str:
    return (
        "❌ Sorry, something went wrong on our side. Please try again in a moment.\n\n"
        "If the problem persists, please contact the restaurant directly."
    )


def request_not_processed() -> str:
    return (
        "⚠️ Sorry, I couldn't process that request.\n\n"
        "Type 'help' to see what I can do, or 'menu' to see our items."
    )


# ---------------------------------------------------------------------- #
# Payments
# ---------------------------------------------------------------------- #

def upi_link(order: OrderRecord, upi_id: str, restaurant_name: str) -> str:
    """``upi://pay`` deep link with the order id as transaction reference."""
    note = quote(f"Payment for Order {order.order_id}")
    return (
        f"upi://pay?pa={upi_id}&pn={quote(restaurant_name)}"
        f"&am={plain_number(order.total_amount)}&cu=INR&tn={note}&tr={order.order_id}"
    )


def no_pending_order() -> str:
    return "❌ No pending order found. Please place an order first before selecting payment method."


def no_unpaid_order() -> str:
    return "❌ No pending payment found. All your recent orders are either paid or cancelled."


def no_orders_for_payment() -> str:
    return "📋 No recent orders found. Please place an order first!"


def payment_options(order: OrderRecord, currency: str = DEFAULT_CURRENCY) -> str:
    return (
        f"💳 *Payment Options for Order #{order.order_id}*\n\n"
        f"💰 Amount: {format_amount(order.total_amount, currency)}\n\n"
        "*Choose your payment method:*\n\n"
        "🚚 *1. Cash on Delivery (COD)*\n"
        '   Reply: "pay cod"\n\n'
        "📱 *2. UPI Payment (Instant)*\n"
        '   Reply: "pay upi"\n\n'
        '❓ Need help? Reply "payment help"'
    )


def cod_confirmation(order: OrderRecord, currency: str = DEFAULT_CURRENCY) -> str:
    return (
        "🚚 *Cash on Delivery Selected*\n\n"
        f"📋 Order #{order.order_id}\n"
        f"💰 Amount: {format_amount(order.total_amount, currency)}\n\n"
        "✅ Your order is confirmed!\n"
        "💵 Please keep exact cash ready for delivery\n\n"
        "🕐 Estimated delivery: 30-45 minutes"
    )


def upi_payment(order: OrderRecord, upi_id: str, restaurant_name: str, currency: str = DEFAULT_CURRENCY) -> str:
    link = upi_link(order, upi_id, restaurant_name)
    amount = format_amount(order.total_amount, currency)
    return (
        f"📱 *UPI Payment for Order #{order.order_id}*\n\n"
        f"💰 Amount: {amount}\n\n"
        f"🔗 *Option 1: UPI Link*\n{link}\n\n"
        f"📸 *Option 2: Scan QR Code*\n{QR_CODE_ENDPOINT}{quote(link, safe='')}\n\n"
        "💳 *Option 3: Manual Transfer*\n"
        f"UPI ID: {upi_id}\n"
        f"Amount: {amount}\n"
        f"Reference: {order.order_id}\n\n"
        '✅ After payment, reply "paid [transaction_id]"'
    )


def payment_confirmed(order: OrderRecord, transaction_id: str, currency: str = DEFAULT_CURRENCY) -> str:
    return (
        "✅ *Payment Received!*\n\n"
        f"📋 Order #{order.order_id}\n"
        f"💰 Amount: {format_amount(order.total_amount, currency)}\n"
        f"🆔 Transaction ID: {transaction_id}\n\n"
        "🎉 Thank you! Your order is being prepared."
    )


def payment_status(order: OrderRecord, currency: str = DEFAULT_CURRENCY) -> str:
    method = order.payment_method.value if order.payment_method else ""
    lines = [
        "💳 *Payment Status*",
        "",
        f"📋 Order #{order.order_id}",
        f"💰 Amount: {format_amount(order.total_amount, currency)}",
        f"📊 Order Status: {order.status.value.upper()}",
        f"{PAYMENT_STATUS_EMOJIS[order.payment_status]} Payment: {order.payment_status.value.upper()}",
        f"💳 Method: {PAYMENT_METHOD_NAMES.get(method, 'Not selected')}",
    ]
    if order.payment_id:
        lines += ["", f"🆔 Payment ID: {order.payment_id}"]
    if order.payment_status == PaymentStatus.PENDING:
        lines += ["", '💡 Need to pay? Reply "payment options"']
    elif order.payment_status == PaymentStatus.PAID:
        lines += ["", "🎉 Payment confirmed! Order in progress."]
    elif order.payment_status == PaymentStatus.COD:
        lines += ["", "🚚 Pay cash when delivered."]
    return "\n".join(lines)


def payment_help() -> str:
    return (
        "💡 *Payment Help*\n\n"
        "🚚 *Cash on Delivery (COD)*\n"
        '   Type: "pay cod"\n'
        "   Pay when food is delivered\n\n"
        "📱 *UPI Payment (Instant)*\n"
        '   Type: "pay upi"\n'
        "   PhonePe, Google Pay, Paytm, etc.\n\n"
        "*Commands:*\n"
        '• "payment status" - Check payment status\n'
        '• "paid [transaction_id]" - Confirm UPI payment\n'
        '• "payment options" - Show payment methods'
    )


# ---------------------------------------------------------------------- #
# Owner
# ---------------------------------------------------------------------- #

def owner_help() -> str:
    return (
        "👑 *RESTAURANT OWNER COMMANDS*\n\n"
        "📋 *Order Management:*\n"
        "• 'orders' - View pending orders (numbered list)\n"
        "• 'orders today' - All today's orders\n"
        "• 'orders completed' - Completed orders\n"
        "• 'complete 1' or 'done 1' - Complete order #1\n"
        "• 'complete A7H4' - Use the short code (last 4 chars)\n"
        "• 'cancel order [ID]' - Cancel an order\n"
        "• 'stats' - Daily statistics\n\n"
        "🍽️ *Menu Management:*\n"
        "• 'menu manage' - View menu management options\n"
        "• 'add item [name] [price] [description]' - Add new item\n"
        "• 'edit item [name/id] price [new_price]' - Change price\n"
        "• 'edit item [name/id] name [new_name]' - Change name\n"
        "• 'delete item [name/id]' - Remove item\n"
        "• 'toggle item [name/id]' - Enable/disable item"
    )


def _short_location(address: str) -> str:
    match = _CURRENT_LOCATION_RE.search(address or "")
    return match.group(1).strip()[:30] if match else ""


def owner_orders(
    orders: list[OrderRecord],
    order_filter: OrderFilter,
    display_limit: int = 8,
    currency: str = DEFAULT_CURRENCY,
) -> str:
    """Compact numbered order list; numbers match 'done <n>' positions for the pending view."""
    label = order_filter.value
    if not orders:
        return (
            f"📋 *No {label} orders found.*\n\n"
            '• "orders today" - Today\'s orders\n'
            '• "stats" - Daily summary'
        )

    shown = orders[:display_limit]
    lines = [f"📋 *{label.upper()} ORDERS ({len(orders)})*", ""]
    for index, order in enumerate(shown, start=1):
        location = _short_location(order.delivery_address)
        location_text = f" 📍 {location}" if location else ""
        payment_emoji = PAYMENT_STATUS_EMOJIS.get(order.payment_status, "⏳")
        items_text = ", ".join(f"{i.quantity}x {i.name[:25]}" for i in order.items)
        if len(items_text) > 100:
            items_text = items_text[:97] + "..."
        lines.append(
            f"{index}. ({order.short_code}) {order.customer_name[:20]}{location_text} {payment_emoji}"
        )
        lines.append(f"{format_amount(order.total_amount, currency, decimals=0)} • {items_text}")
        lines.append("")

    if len(orders) > len(shown):
        lines += [f"... and {len(orders) - len(shown)} more orders", ""]

    if order_filter == OrderFilter.PENDING:
        lines.append(f'🚀 *Complete:* "done 1" or "complete {shown[0].short_code}"')
        lines.append('📋 *More:* "orders today" • "stats"')
    else:
        lines.append('📋 *Commands:* "orders" • "stats"')
    return "\n".join(lines)


def owner_order_not_found(reference: str) -> str:
    return (
        f'❌ Order "{reference}" not found.\n\n'
        "💡 Type \"orders\" to see the numbered list, then use \"done 1\" "
        'or the last 4 characters: "complete A7H4"'
    )


def owner_order_completed(order: OrderRecord, currency: str = DEFAULT_CURRENCY) -> str:
    return (
        f"✅ *Order #{order.order_id} marked as COMPLETED!*\n\n"
        f"👤 Customer: {order.customer_name}\n"
        f"💰 Amount: {format_amount(order.total_amount, currency)}\n"
        f"📱 Phone: {order.customer_phone}"
    )


def owner_order_cancelled(order: OrderRecord, currency: str = DEFAULT_CURRENCY) -> str:
    return (
        f"❌ *Order #{order.order_id} marked as CANCELLED*\n\n"
        f"👤 Customer: {order.customer_name}\n"
        f"💰 Amount: {format_amount(order.total_amount, currency)}\n"
        f"📱 Phone: {order.customer_phone}\n\n"
        "Please follow up with the customer if needed."
    )


def owner_stats(stats: DailyStats, currency: str = DEFAULT_CURRENCY) -> str:
    lines = [
        "📊 *DAILY STATISTICS*",
        f"📅 {stats.date}",
        "",
        "📈 *Summary:*",
        f"• Total Orders: {stats.total_orders}",
        f"• Pending: {stats.pending_orders}",
        f"• Completed: {stats.completed_orders}",
        f"• Cancelled: {stats.cancelled_orders}",
        f"• Revenue: {format_amount(stats.total_revenue, currency)}",
    ]
    if stats.top_items:
        lines += ["", "🏆 *Top Items Today:*"]
        lines += [f"{i}. {t.name} ({t.count}x)" for i, t in enumerate(stats.top_items, start=1)]
    lines += [
        "",
        "🔧 *Commands:*",
        '• "orders" - View pending orders',
        '• "orders today" - All today\'s orders',
        '• "orders completed" - Completed orders',
    ]
    return "\n".join(lines)


def menu_manage(
    restaurant_name: str,
    menu_date: str,
    items: list[MenuItem],
    currency: str = DEFAULT_CURRENCY,
) -> str:
    available = sum(1 for i in items if i.available)
    lines = [
        "🍽️ *MENU MANAGEMENT*",
        f"🏪 {restaurant_name}",
        f"📅 Last Updated: {menu_date}",
        f"📊 {available}/{len(items)} items available",
        "",
        "📋 *Current Menu:*",
    ]
    for item in items:
        status = "✅" if item.available else "❌"
        lines.append(f"{item.id}. {item.emoji} {item.name} - {format_price(item.price, currency)} {status}")
    lines += [
        "",
        "💡 *Examples:*",
        "• add item Samosa 25",
        "• add item Masala Chai 15 Hot spiced tea",
        "• edit item 1 price 35",
        "• edit item Samosa name Crispy Samosa",
        "• delete item 8",
        "• toggle item Lassi",
    ]
    return "\n".join(lines)


def menu_change(result: MenuChangeResult, currency: str = DEFAULT_CURRENCY) -> str:
    """Owner-facing outcome of add/edit/delete/toggle item."""
    if not result.get("success"):
        return f"❌ {result.get('message', 'Menu update failed.')}"

    item = result["item"]
    availability = "✅ Available" if item.available else "❌ Unavailable"
    return (
        f"✅ {result['message']}\n\n"
        "📝 *Item Details:*\n"
        f"• ID: {item.id}\n"
        f"• Name: {item.name}\n"
        f"• Price: {format_price(item.price, currency)}\n"
        f"• Category: {item.category}\n"
        f"• Status: {availability}"
    )
