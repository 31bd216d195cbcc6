"""
Shared inline keyboards.
"""

from typing import List, Optional, Sequence

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from ..app.models import Author, CartItem, Comment, GameEntity, Product, Review, UserRanking
from ..app.services.battle import SLOT_TITLES

# Empty size in callback data
NO_SIZE = "-"

LEADERBOARD_TABS = ["users", "characters", "stages", "weapons", "announcers"]

GRID_PAGE_SIZE = 8

CALLBACK_DATA_LIMIT = 64

# Ranked users linked from the users leaderboard
LEADERBOARD_LINKS = 10


def size_token(size: Optional[str]) -> str:
    return size or NO_SIZE


def parse_size(token: str) -> Optional[str]:
    return None if token == NO_SIZE else token


def back_button(callback_data: str = "back_to_main", text: str = "◀️ Back") -> List[InlineKeyboardButton]:
    return [InlineKeyboardButton(text=text, callback_data=callback_data)]


def get_main_keyboard(is_authenticated: bool, username: Optional[str] = None) -> InlineKeyboardMarkup:
    """Navbar."""
    rows = [
        [
            InlineKeyboardButton(text="🛍 Merch", callback_data="merch"),
            InlineKeyboardButton(text="⚔️ Play", callback_data="play"),
        ],
        [
            InlineKeyboardButton(text="🏆 Leaderboards", callback_data="lb:users"),
            InlineKeyboardButton(text="ℹ️ About", callback_data="about"),
        ],
    ]
    if is_authenticated:
        rows += [
            [
                InlineKeyboardButton(text="🛒 Cart", callback_data="cart"),
                InlineKeyboardButton(text="📦 Orders", callback_data="orders"),
            ],
            [
                InlineKeyboardButton(text=f"👤 {username or 'Profile'}", callback_data="profile"),
                InlineKeyboardButton(text="🚪 Logout", callback_data="logout"),
            ],
        ]
    else:
        rows.append([
            InlineKeyboardButton(text="📝 Signup", callback_data="signup"),
            InlineKeyboardButton(text="🔑 Login", callback_data="login"),
        ])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def home_keyboard(products: Sequence[Product], index: int, is_authenticated: bool, username: Optional[str] = None) -> InlineKeyboardMarkup:
    """Featured product carousel on top of the navbar."""
    rows = []
    if products:
        count = len(products)
        current = products[index % count]
        rows.append([
            InlineKeyboardButton(text="◀️", callback_data=f"home:{(index - 1) % count}"),
            InlineKeyboardButton(text="👀 View", callback_data=f"product:{current.id}"),
            InlineKeyboardButton(text="▶️", callback_data=f"home:{(index + 1) % count}"),
        ])
    rows += get_main_keyboard(is_authenticated, username).inline_keyboard
    return InlineKeyboardMarkup(inline_keyboard=rows)


def cancel_keyboard(callback_data: str = "cancel") -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="❌ Cancel", callback_data=callback_data)]
    ])


def login_prompt_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text="🔑 Log in", callback_data="login"),
            InlineKeyboardButton(text="📝 Sign up", callback_data="signup"),
        ],
        back_button(),
    ])


def confirm_keyboard(yes_data: str, no_data: str, yes_text: str = "✅ Yes", no_text: str = "❌ No") -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text=yes_text, callback_data=yes_data),
            InlineKeyboardButton(text=no_text, callback_data=no_data),
        ]
    ])


def rating_keyboard(cancel_data: str = "cancel") -> InlineKeyboardMarkup:
    """Star rating picker, 1-5."""
    return InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text="⭐", callback_data="rating:1"),
            InlineKeyboardButton(text="⭐⭐", callback_data="rating:2"),
            InlineKeyboardButton(text="⭐⭐⭐", callback_data="rating:3"),
        ],
        [
            InlineKeyboardButton(text="⭐⭐⭐⭐", callback_data="rating:4"),
            InlineKeyboardButton(text="⭐⭐⭐⭐⭐", callback_data="rating:5"),
        ],
        [InlineKeyboardButton(text="❌ Cancel", callback_data=cancel_data)],
    ])


# ---- catalog ----

def product_list_keyboard(products: Sequence[Product]) -> InlineKeyboardMarkup:
    rows = [
        [InlineKeyboardButton(text=f"{i}. {p.name}"[:60], callback_data=f"product:{p.id}")]
        for i, p in enumerate(products, 1)
    ]
    rows.append(back_button())
    return InlineKeyboardMarkup(inline_keyboard=rows)


def product_keyboard(product: Product, sizes: Sequence[str], selected: str, image: int = 0) -> InlineKeyboardMarkup:
    rows = []
    count = len(product.images)
    if count > 1:
        image %= count
        rows.append([
            InlineKeyboardButton(text="◀️", callback_data=f"img:{product.id}:{(image - 1) % count}:{selected}"),
            InlineKeyboardButton(text=f"{image + 1}/{count}", callback_data="noop"),
            InlineKeyboardButton(text="▶️", callback_data=f"img:{product.id}:{(image + 1) % count}:{selected}"),
        ])
    rows.append([
        InlineKeyboardButton(
            text=f"✅ {size}" if size == selected else size,
            callback_data=f"size:{product.id}:{size}:{image}",
        )
        for size in sizes
    ])
    rows += [
        [
            InlineKeyboardButton(text="🛒 Add to cart", callback_data=f"add_cart:{product.id}:{selected}"),
            InlineKeyboardButton(text="⚡ Buy now", callback_data=f"buy:{product.id}"),
        ],
        [
            InlineKeyboardButton(text="⭐ Reviews", callback_data=f"reviews:{product.id}"),
            InlineKeyboardButton(text="📏 Size chart", callback_data="size_chart"),
        ],
        back_button("merch", "◀️ Merch"),
    ]
    return InlineKeyboardMarkup(inline_keyboard=rows)


# ---- cart / orders ----

def cart_keyboard(items: Sequence[CartItem]) -> InlineKeyboardMarkup:
    rows = []
    for i, item in enumerate(items, 1):
        key = f"{item.product.id}:{size_token(item.size)}"
        rows.append([
            InlineKeyboardButton(text=f"{i}.", callback_data=f"product:{item.product.id}"),
            InlineKeyboardButton(text="➖", callback_data=f"cart_dec:{key}"),
            InlineKeyboardButton(text=str(item.quantity), callback_data="noop"),
            InlineKeyboardButton(text="➕", callback_data=f"cart_inc:{key}"),
            InlineKeyboardButton(text="🗑", callback_data=f"cart_rm:{key}"),
        ])
    if items:
        rows.append([InlineKeyboardButton(text="💳 Checkout", callback_data="checkout:cart")])
    else:
        rows.append([InlineKeyboardButton(text="🛍 Go to Merch Store", callback_data="merch")])
    rows.append(back_button())
    return InlineKeyboardMarkup(inline_keyboard=rows)


def orders_keyboard(orders) -> InlineKeyboardMarkup:
    rows = [
        [InlineKeyboardButton(text=f"{i}. Order …{order.id[-6:]}", callback_data=f"order:{order.id}")]
        for i, order in enumerate(orders, 1)
    ]
    rows.append(back_button())
    return InlineKeyboardMarkup(inline_keyboard=rows)


# ---- reviews ----

def profile_button(author: Author, text: Optional[str] = None) -> Optional[InlineKeyboardButton]:
    """Link to a public profile; None when the username doesn't fit in callback data."""
    callback_data = f"user:{author.username}"
    if not author.username or len(callback_data.encode()) > CALLBACK_DATA_LIMIT:
        return None
    return InlineKeyboardButton(text=text or f"👤 {author.username}", callback_data=callback_data)


def review_section_keyboard(product_id: str, reviews: Sequence[Review], visible: int, viewer_id: Optional[str], page_size: int) -> InlineKeyboardMarkup:
    rows = []
    for i, review in enumerate(reviews[:visible], 1):
        row = [
            InlineKeyboardButton(text=f"{i}. 👍", callback_data=f"rv_like:{review.id}"),
            InlineKeyboardButton(text="👎", callback_data=f"rv_dislike:{review.id}"),
            InlineKeyboardButton(text="💬", callback_data=f"review:{review.id}"),
        ]
        author = profile_button(review.user, "👤")
        if author is not None:
            row.append(author)
        if viewer_id and review.user.id == viewer_id:
            row.append(InlineKeyboardButton(text="🗑", callback_data=f"rv_del:{review.id}"))
        else:
            row.append(InlineKeyboardButton(text="🚩", callback_data=f"rv_report:{review.id}"))
        rows.append(row)
    if visible < len(reviews):
        rows.append([InlineKeyboardButton(
            text="⬇️ Show more reviews",
            callback_data=f"reviews:{product_id}:{visible + page_size}",
        )])
    rows.append([InlineKeyboardButton(text="✍️ Write a review", callback_data=f"rv_new:{product_id}")])
    rows.append(back_button(f"product:{product_id}", "◀️ Product"))
    return InlineKeyboardMarkup(inline_keyboard=rows)


def review_page_keyboard(review: Review, visible_comments: int, viewer_id: Optional[str], page_size: int) -> InlineKeyboardMarkup:
    rows = [[
        InlineKeyboardButton(text="👍", callback_data=f"rv_like:{review.id}"),
        InlineKeyboardButton(text="👎", callback_data=f"rv_dislike:{review.id}"),
        InlineKeyboardButton(
            text="🗑" if viewer_id and review.user.id == viewer_id else "🚩",
            callback_data=f"rv_del:{review.id}" if viewer_id and review.user.id == viewer_id else f"rv_report:{review.id}",
        ),
    ]]
    author = profile_button(review.user)
    if author is not None:
        rows.append([author])
    for i, comment in enumerate(review.comments[:visible_comments], 1):
        rows.append(_comment_row(i, comment, viewer_id))
    if visible_comments < len(review.comments):
        rows.append([InlineKeyboardButton(
            text="⬇️ Show more comments",
            callback_data=f"review:{review.id}:{visible_comments + page_size}",
        )])
    rows.append([InlineKeyboardButton(text="💬 Add a comment", callback_data=f"cm_new:{review.id}")])
    if review.product:
        rows.append(back_button(f"reviews:{review.product}", "◀️ Reviews"))
    else:
        rows.append(back_button())
    return InlineKeyboardMarkup(inline_keyboard=rows)


def _comment_row(index: int, comment: Comment, viewer_id: Optional[str]) -> List[InlineKeyboardButton]:
    row = [
        InlineKeyboardButton(text=f"{index}. 👍", callback_data=f"cm_like:{comment.id}"),
        InlineKeyboardButton(text="👎", callback_data=f"cm_dislike:{comment.id}"),
    ]
    author = profile_button(comment.user, "👤")
    if author is not None:
        row.append(author)
    if viewer_id and comment.user.id == viewer_id:
        row.append(InlineKeyboardButton(text="🗑", callback_data=f"cm_del:{comment.id}"))
    else:
        row.append(InlineKeyboardButton(text="🚩", callback_data=f"cm_report:{comment.id}"))
    return row


# ---- profile ----

def profile_keyboard(username: str, is_own: bool) -> InlineKeyboardMarkup:
    rows = []
    if is_own:
        rows.append([
            InlineKeyboardButton(text="✏️ Edit profile", callback_data="profile_edit"),
            InlineKeyboardButton(text="📊 Stats", callback_data="stats"),
        ])
    rows.append(back_button())
    return InlineKeyboardMarkup(inline_keyboard=rows)


def profile_edit_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text="Username", callback_data="edit:username"),
            InlineKeyboardButton(text="Email", callback_data="edit:email"),
        ],
        [
            InlineKeyboardButton(text="Bio", callback_data="edit:bio"),
            InlineKeyboardButton(text="Profile picture", callback_data="edit:profile_pic"),
        ],
        back_button("profile", "◀️ Profile"),
    ])


# ---- play ----

def battle_keyboard() -> InlineKeyboardMarkup:
    slots = list(SLOT_TITLES.items())
    rows = [
        [InlineKeyboardButton(text=f"🔄 {title}", callback_data=f"play_slot:{slot}:0") for slot, title in slots[i:i + 2]]
        for i in range(0, len(slots), 2)
    ]
    rows.append([
        InlineKeyboardButton(text="🎲 Randomize", callback_data="play_random"),
        InlineKeyboardButton(text="⚔️ Fight!", callback_data="fight"),
    ])
    rows.append(back_button())
    return InlineKeyboardMarkup(inline_keyboard=rows)


def selection_grid(slot: str, options: Sequence[GameEntity], selected_id: Optional[str], page: int = 0, disabled_id: Optional[str] = None) -> InlineKeyboardMarkup:
    """Paged two-column grid of game entities with the current choice marked."""
    pages = max(1, (len(options) + GRID_PAGE_SIZE - 1) // GRID_PAGE_SIZE)
    page = max(0, min(page, pages - 1))
    start = page * GRID_PAGE_SIZE
    buttons = []
    for index, entity in enumerate(options[start:start + GRID_PAGE_SIZE], start):
        if entity.id == disabled_id:
            text = f"🚫 {entity.name}"
        elif entity.id == selected_id:
            text = f"✅ {entity.name}"
        else:
            text = entity.name
        buttons.append(InlineKeyboardButton(text=text[:40], callback_data=f"play_pick:{slot}:{index}"))
    rows = [buttons[i:i + 2] for i in range(0, len(buttons), 2)]
    if pages > 1:
        rows.append([
            InlineKeyboardButton(text="◀️", callback_data=f"play_slot:{slot}:{(page - 1) % pages}"),
            InlineKeyboardButton(text=f"{page + 1}/{pages}", callback_data="noop"),
            InlineKeyboardButton(text="▶️", callback_data=f"play_slot:{slot}:{(page + 1) % pages}"),
        ])
    rows.append(back_button("play_show", "◀️ Battle"))
    return InlineKeyboardMarkup(inline_keyboard=rows)


# ---- leaderboards ----

def leaderboard_tabs(active: str, rows: Sequence = ()) -> InlineKeyboardMarkup:
    """Tab switcher; the users tab also links each ranked user's profile."""
    tabs = [
        InlineKeyboardButton(text=f"• {tab} •" if tab == active else tab, callback_data=f"lb:{tab}")
        for tab in LEADERBOARD_TABS
    ]
    keyboard = []
    if active == "users":
        links = [
            profile_button(row.user, f"{rank}. {row.user.username}")
            for rank, row in enumerate(rows[:LEADERBOARD_LINKS], 1)
            if isinstance(row, UserRanking)
        ]
        links = [link for link in links if link is not None]
        keyboard += [links[i:i + 2] for i in range(0, len(links), 2)]
    keyboard += [tabs[:3], tabs[3:], back_button()]
    return InlineKeyboardMarkup(inline_keyboard=keyboard)
