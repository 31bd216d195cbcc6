"""
Message renderers.

Pure functions from backend models to HTML message text (the bot runs with
``ParseMode.HTML``). Anything user-generated goes through ``quote``.
"""

from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from aiogram.utils.text_decorations import html_decoration

from ..app.models import (
    CartItem,
    Comment,
    EntityRanking,
    Order,
    Product,
    Review,
    User,
    UserRanking,
    UserStats,
)
from ..app.services.battle import SLOT_TITLES, BattleSetup
from ..app.services.cart import cart_total

quote = html_decoration.quote

MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}

STATUS_BADGES = {
    "paid": "🟢 Paid",
    "pending": "🟡 Pending",
    "cancelled": "🔴 Cancelled",
}

# Users and announcers are ranked by battles played, the rest by win rate
RANKED_BY_PLAYED = {"users", "announcers"}


def format_price(amount) -> str:
    amount = Decimal(str(amount))
    if amount == amount.to_integral_value():
        return f"₹{amount:,.0f}"
    return f"₹{amount:,.2f}"


def format_minor_units(amount: int) -> str:
    """Gateway amounts are in paise."""
    return format_price(Decimal(amount) / 100)


def stars(rating: int) -> str:
    rating = max(0, min(5, int(rating)))
    return "★" * rating + "☆" * (5 - rating)


def win_rate(ratio: float) -> str:
    pct = round(ratio * 100, 1)
    if pct == int(pct):
        return f"{int(pct)}%"
    return f"{pct}%"


def status_badge(status: str) -> str:
    return STATUS_BADGES.get(status, status.capitalize())


def format_date(value) -> str:
    if not value:
        return "—"
    return f"{value:%B} {value.day}, {value.year}"


# ---- catalog ----

def render_home(products: Sequence[Product], index: int) -> str:
    text = (
        "<b>LafdaClub</b>\n"
        "<i>Merch. Mayhem. Madness. Mayank.</i>\n"
    )
    if products:
        product = products[index % len(products)]
        text += (
            f"\n<b>Featured</b> ({index % len(products) + 1}/{len(products)})\n"
            f"{quote(product.name)} — {format_price(product.price)}"
        )
    return text


def render_product_list(products: Sequence[Product]) -> str:
    if not products:
        return "<b>🛍 Merch</b>\n\nNo products yet. Check back soon!"
    lines = ["<b>🛍 Merch</b>", ""]
    for i, product in enumerate(products, 1):
        lines.append(f"{i}. {quote(product.name)} — {format_price(product.price)}")
    return "\n".join(lines)


def render_product(product: Product, size: Optional[str] = None) -> str:
    text = f"<b>{quote(product.name)}</b>\n\n💰 {format_price(product.price)}"
    if product.description:
        # Photo captions are capped at 1024 characters
        description = product.description.strip()
        text += f"\n\n{quote(description[:700])}" + ("…" if len(description) > 700 else "")
    if product.category:
        text += f"\n\n<i>Category: {quote(product.category)}</i>"
    if size:
        text += f"\nSize: <b>{quote(size)}</b>"
    return text


# Size, chest and length in inches
SIZE_CHART = [("S", 36, 26), ("M", 38, 27), ("L", 40, 28), ("XL", 42, 29)]


def render_size_chart() -> str:
    """Plain text: shown in a callback alert, which has no markup."""
    lines = ["Size chart (inches)", "Size · Chest · Length"]
    lines += [f"{size} · {chest} · {length}" for size, chest, length in SIZE_CHART]
    return "\n".join(lines)


# ---- cart / orders ----

def render_cart(items: Sequence[CartItem]) -> str:
    if not items:
        return "<b>🛒 Your cart</b>\n\nYour cart is empty.\n\n<i>Add something from the merch store</i>"
    lines = ["<b>🛒 Your cart</b>", ""]
    for i, item in enumerate(items, 1):
        size = f" ({quote(item.size)})" if item.size else ""
        subtotal = item.product.price * item.quantity
        lines.append(
            f"{i}. {quote(item.product.name)}{size}\n"
            f"   {format_price(item.product.price)} × {item.quantity} = <b>{format_price(subtotal)}</b>"
        )
    lines += ["", f"<b>Total: {format_price(cart_total(items))}</b>"]
    return "\n".join(lines)


def render_checkout_summary(items: Sequence[dict], amount: int, from_cart: bool) -> str:
    title = "Checkout Your Cart" if from_cart else "Checkout Product"
    lines = [f"<b>💳 {title}</b>", ""]
    for item in items:
        product = item.get("product") or {}
        name = product.get("name") if isinstance(product, dict) else None
        size = f" ({quote(item['size'])})" if item.get("size") else ""
        lines.append(f"• {quote(name or 'Item')}{size} × {item.get('quantity', 1)}")
    lines += ["", f"<b>Total: {format_minor_units(amount)}</b>"]
    return "\n".join(lines)


def render_orders(orders: Sequence[Order]) -> str:
    if not orders:
        return "<b>📦 Your orders</b>\n\nYou haven't placed any orders yet."
    lines = ["<b>📦 Your orders</b>", ""]
    for i, order in enumerate(orders, 1):
        count = sum(item.quantity for item in order.items)
        lines.append(
            f"{i}. {format_date(order.created_at)} · {count} item(s) · "
            f"{format_price(order.total_amount)} · {status_badge(order.status)}"
        )
    return "\n".join(lines)


def render_order(order: Order) -> str:
    lines = [
        "<b>📦 Order</b>",
        f"Order ID: <code>{quote(order.id)}</code>",
        f"Placed on {format_date(order.created_at)}",
        f"Status: {status_badge(order.status)}",
        "",
    ]
    for item in order.items:
        size = f" ({quote(item.size)})" if item.size else ""
        lines.append(
            f"• {quote(item.product_name)}{size} — "
            f"{format_price(item.unit_price)} × {item.quantity}"
        )
    lines += ["", f"<b>Total: {format_price(order.total_amount)}</b>"]
    shipping = order.shipping_details
    if shipping:
        lines += [
            "",
            "<b>Shipping</b>",
            quote(shipping.name),
            quote(shipping.address),
            f"📞 {quote(shipping.phone)} · PIN {quote(shipping.pincode)}",
        ]
    return "\n".join(lines)


# ---- reviews ----

def _votes(likes: List[str], dislikes: List[str], viewer_id: Optional[str]) -> str:
    liked = "👍" if viewer_id in likes else "👍🏻"
    disliked = "👎" if viewer_id in dislikes else "👎🏻"
    return f"{liked} {len(likes)}  {disliked} {len(dislikes)}"


def render_review(review: Review, viewer_id: Optional[str] = None, index: Optional[int] = None) -> str:
    prefix = f"{index}. " if index is not None else ""
    return (
        f"{prefix}<b>{quote(review.user.username or 'Anonymous')}</b> {stars(review.rating)}\n"
        f"{quote(review.text)}\n"
        f"{_votes(review.likes, review.dislikes, viewer_id)}  💬 {len(review.comments)}"
    )


def render_comment(comment: Comment, viewer_id: Optional[str] = None, index: Optional[int] = None) -> str:
    prefix = f"{index}. " if index is not None else ""
    return (
        f"{prefix}<b>{quote(comment.user.username or 'Anonymous')}</b>: {quote(comment.text)}\n"
        f"   {_votes(comment.likes, comment.dislikes, viewer_id)}"
    )


def render_review_section(reviews: Sequence[Review], visible: int, viewer_id: Optional[str] = None) -> str:
    if not reviews:
        return "<b>⭐ Reviews</b>\n\nNo reviews yet. Be the first!"
    average = sum(r.rating for r in reviews) / len(reviews)
    lines = [f"<b>⭐ Reviews</b> ({len(reviews)}, avg {average:.1f})", ""]
    for i, review in enumerate(reviews[:visible], 1):
        lines.append(render_review(review, viewer_id, i))
        lines.append("")
    if visible < len(reviews):
        lines.append(f"<i>Showing {visible} of {len(reviews)}</i>")
    return "\n".join(lines).rstrip()


def render_review_page(review: Review, visible_comments: int, viewer_id: Optional[str] = None) -> str:
    lines = [render_review(review, viewer_id), ""]
    if review.comments:
        lines.append("<b>Comments</b>")
        for i, comment in enumerate(review.comments[:visible_comments], 1):
            lines.append(render_comment(comment, viewer_id, i))
        if visible_comments < len(review.comments):
            lines.append(f"<i>Showing {visible_comments} of {len(review.comments)}</i>")
    else:
        lines.append("<i>No comments yet</i>")
    return "\n".join(lines)


# ---- profile / stats ----

def render_profile(user: User, is_own: bool = False) -> str:
    lines = [f"<b>👤 {quote(user.username)}</b>"]
    if is_own and user.email:
        lines.append(f"✉️ {quote(user.email)}")
    lines.append("")
    lines.append(quote(user.bio) if user.bio else "<i>No bio yet</i>")
    if user.created_at:
        lines += ["", f"Member since {format_date(user.created_at)}"]
    return "\n".join(lines)


def _name(entity) -> str:
    return quote(entity.name) if entity and entity.name else "N/A"


def render_stats(stats: UserStats, username: str) -> str:
    lines = [
        f"<b>📊 {quote(username)}'s Stats</b>",
        "",
        f"Total Battles: <b>{stats.total_battles}</b>",
        "",
        f"Favorite Character: {_name(stats.favorite_character)}",
        f"Favorite Weapon: {_name(stats.favorite_weapon)}",
        f"Favorite Stage: {_name(stats.favorite_stage)}",
        f"Favorite Announcer: {_name(stats.favorite_announcer)}",
        "",
        "<b>Recent Battles</b>",
    ]
    if not stats.recent_battles:
        lines.append("<i>No recent battles</i>")
    for battle in stats.recent_battles:
        lines.append(
            f"• <b>{_name(battle.character1)}</b> ({_name(battle.weapon1)}) vs "
            f"<b>{_name(battle.character2)}</b> ({_name(battle.weapon2)}) · "
            f"{_name(battle.stage)} · Winner: {_name(battle.winner)}"
        )
    return "\n".join(lines)


# ---- leaderboards ----

def podium_order(rows: Sequence) -> List[Tuple[int, object]]:
    """Top three in podium order (2nd, 1st, 3rd), skipping missing places."""
    places = [(place, rows[place - 1]) for place in (2, 1, 3) if len(rows) >= place]
    return places


def _score(tab: str, row) -> str:
    if tab == "users":
        return f"{row.total_battles} battles"
    if tab == "announcers":
        return f"{row.times_picked} battles"
    return f"{win_rate(row.win_ratio)} win rate"


def _row_name(row) -> str:
    if isinstance(row, UserRanking):
        return quote(row.user.username or "Anonymous")
    return quote(row.name)


def render_leaderboard(tab: str, rows: Sequence) -> str:
    title = tab.capitalize()
    ranking = "Ranked by Battles Played" if tab in RANKED_BY_PLAYED else "Ranked by Win Rate"
    lines = [f"<b>🏆 Leaderboards · {title}</b>", f"<i>{ranking}</i>", ""]
    if not rows:
        lines.append("No data yet.")
        return "\n".join(lines)

    # Podium line mirrors the stand: 2nd, 1st, 3rd
    lines.append("   ".join(f"{MEDALS[place]} {_row_name(row)}" for place, row in podium_order(rows)))
    lines.append("")
    for place, row in enumerate(rows[:3], 1):
        lines.append(f"{MEDALS[place]} <b>{_row_name(row)}</b> — {_score(tab, row)}")

    rest = rows[3:]
    if rest:
        lines.append("")
    for rank, row in enumerate(rest, 4):
        extra = ""
        if isinstance(row, EntityRanking) and tab not in RANKED_BY_PLAYED:
            extra = f" (played {row.played})"
        elif isinstance(row, UserRanking):
            extra = f" ({row.battles_won} won)"
        lines.append(f"{rank}. {_row_name(row)} — {_score(tab, row)}{extra}")
    return "\n".join(lines)


# ---- play ----

def render_battle(setup: BattleSetup) -> str:
    lines = ["<b>⚔️ Start a Battle</b>", ""]
    for slot, title in SLOT_TITLES.items():
        entity = getattr(setup, slot)
        lines.append(f"{title}: <b>{_name(entity)}</b>" if entity else f"{title}: <i>not selected</i>")
    if setup.narration:
        lines += ["", "<b>📣 Battle</b>", quote(setup.narration)]
    return "\n".join(lines)
