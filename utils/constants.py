"""
utils/constants.py

Purpose: Centralized static content

- All user-facing messages (Telegram HTML parse mode)
- Button labels
- Inline action identifiers and command names

(Prevents hardcoding across the codebase)
"""

# ============================================================
# CHALLENGE
# ============================================================

LINK_MESSAGE_TEMPLATE = "Link this wallet to Telegram ID: {chat_id}"

MOBILE_USER_AGENT_PATTERN = r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini|Mobile"

# ============================================================
# COMMANDS & INLINE ACTIONS
# ============================================================

CMD_START = "start"
CMD_HELP = "help"
CMD_BROWSE = "browse"
CMD_CREATE = "create"
CMD_MY_GROUPS = "mygroups"
CMD_CONTRIBUTE = "contribute"
CMD_STATUS = "status"
CMD_HISTORY = "history"
CMD_CANCEL = "cancel"

ACTION_BROWSE_GROUPS = "browse_groups"
ACTION_CREATE_GROUP = "create_group"
ACTION_MY_GROUPS = "my_groups"
ACTION_CONTRIBUTE_MENU = "contribute_menu"
ACTION_STATUS = "status"
ACTION_HELP = "help"
ACTION_HISTORY = "history"

PREFIX_JOIN_GROUP = "join_group_"
PREFIX_GROUP_DETAILS = "group_details_"
PREFIX_CONTRIBUTE = "contribute_"
PREFIX_GROUP_STATUS = "group_status_"

# ============================================================
# WELCOME & ONBOARDING
# ============================================================

WELCOME_MESSAGE = """👋 <b>Welcome to ROSCA Circle!</b>

Save together with people you trust. Every cycle each member contributes,
and one member receives the whole pool.

1️⃣ Link your wallet
2️⃣ Browse or create a savings group
3️⃣ Contribute every cycle from your own wallet

🔐 Your keys never leave your wallet. I only prepare transactions for you to sign."""

WELCOME_LINKED_MESSAGE = """👋 <b>Welcome back!</b>

Linked wallet: <code>{wallet}</code>

What would you like to do?"""

HELP_MESSAGE = """📚 <b>Commands</b>

/start - Link your wallet and open the menu
/browse - Browse active savings groups
/create - Create a new savings group
/mygroups - Groups you have joined
/contribute - Contribute to the current cycle
/status - Your standing in each group
/history - Past payouts of your groups
/cancel - Abandon the group you are creating
/help - Show this message"""

LINK_WALLET_PROMPT = """🔗 <b>Link your wallet</b>

Open the link below, connect your wallet and sign the message
<code>{message}</code>

Signing is free and does not send a transaction."""

NOT_LINKED_MESSAGE = """🔗 <b>No wallet linked yet</b>

You need to link a wallet before you can do this. Tap the button below."""

WALLET_LINKED_MESSAGE = """✅ <b>Wallet linked!</b>

<code>{wallet}</code> is now connected to this chat.
Use /browse to find a group or /create to start one."""

# ============================================================
# GROUP CREATION FLOW
# ============================================================

ASK_GROUP_NAME_MESSAGE = """<b>Step 1 of 5</b> 📍

What is the <b>name</b> of your savings group?"""

ASK_GROUP_DESCRIPTION_MESSAGE = """<b>Step 2 of 5</b> 📍

Add a short <b>description</b> for the group."""

ASK_AMOUNT_MESSAGE = """<b>Step 3 of 5</b> 📍

How much should each member contribute per cycle (in {symbol})?
Example: 0.1"""

ASK_DURATION_MESSAGE = """<b>Step 4 of 5</b> 📍

How many <b>days</b> should each cycle last?
Example: 30"""

ASK_PARTICIPANTS_MESSAGE = """<b>Step 5 of 5</b> 📍

What is the <b>maximum number of members</b>? (2-50)"""

INVALID_NAME_MESSAGE = "❌ The group name cannot be empty. Please send a name."
INVALID_DESCRIPTION_MESSAGE = "❌ The description cannot be empty. Please send a short description."
INVALID_AMOUNT_MESSAGE = "❌ Please enter a positive amount, e.g. <code>0.1</code>."
INVALID_DURATION_MESSAGE = "❌ Please enter a whole number of days greater than zero, e.g. <code>30</code>."
INVALID_PARTICIPANTS_MESSAGE = "❌ Please enter a whole number between 2 and 50."

GROUP_CREATION_CANCELLED_MESSAGE = "🗑️ Group creation cancelled."
NOTHING_TO_CANCEL_MESSAGE = "There is nothing to cancel."

GROUP_SUMMARY_MESSAGE = """📋 <b>{name}</b>
{description}

💰 Contribution: {amount}
⏱️ Cycle: {days} days
👥 Max members: {participants}"""

# ============================================================
# TRANSACTIONS
# ============================================================

TRANSACTION_READY_MESSAGE = """📝 <b>Transaction ready to sign</b>
{description}

<b>To:</b> <code>{to}</code>
<b>Value:</b> {value}
<b>Gas (indicative):</b> {gas}
<b>Chain ID:</b> {chain_id}
<b>Data:</b>
<code>{data}</code>

Send this from your own wallet. I never sign or submit transactions for you."""

ALREADY_CONTRIBUTED_MESSAGE = "✅ You have already contributed to the current cycle of this group."
NOT_ENROLLED_MESSAGE = "⚠️ Your wallet is not enrolled in this group yet. Wait for your join transaction to confirm."
GROUP_FULL_MESSAGE = "⚠️ This group is already full."

# ============================================================
# GROUP VIEWS
# ============================================================

BROWSE_HEADER = "🔎 <b>Active savings groups</b>"
NO_GROUPS_MESSAGE = "There are no active groups right now. Use /create to start one!"
NO_MEMBERSHIPS_MESSAGE = "You have not joined any groups yet. Use /browse to find one."
MY_GROUPS_HEADER = "👥 <b>Your groups</b>"
STATUS_HEADER = "📊 <b>Your status</b>"
HISTORY_HEADER = "📜 <b>Payout history</b>"
NO_PAYOUTS_MESSAGE = "No payouts yet."
CONTRIBUTE_MENU_HEADER = "💸 <b>Choose a group to contribute to</b>"
GROUP_NOT_FOUND_MESSAGE = "❌ That group could not be found."
RECIPIENT_PENDING = "not yet determined"

GROUP_LINE = """<b>#{group_id} {name}</b>
💰 {amount} per cycle · ⏱️ {days} days · 👥 {current}/{max}"""

GROUP_DETAILS_MESSAGE = """📋 <b>#{group_id} {name}</b>
{description}

💰 Contribution: {amount}
⏱️ Cycle length: {days} days
👥 Members: {current}/{max}
👤 Creator: <code>{creator}</code>
📄 Contract: <code>{contract}</code>
🗓️ Created: {created}"""

STATUS_LINE = """<b>#{group_id} {name}</b>
Enrolled: {enrolled} · Paid this cycle: {contributed}
Contributions: {total} · Received payout: {received}"""

CYCLE_INFO_MESSAGE = """🔄 Cycle {cycle}
🏦 Pool: {pool}
🧾 Contributions this cycle: {contributions}/{participants}
🎯 Recipient: {recipient}
⏳ Time left: {remaining}"""

PAYOUT_LINE = "• {date}: {amount} → <code>{recipient}</code>"

# ============================================================
# BUTTON LABELS
# ============================================================

BUTTON_LINK_WALLET = "🔗 Link Wallet"
BUTTON_BROWSE = "🔎 Browse Groups"
BUTTON_CREATE = "➕ Create Group"
BUTTON_MY_GROUPS = "👥 My Groups"
BUTTON_CONTRIBUTE = "💸 Contribute"
BUTTON_STATUS = "📊 Status"
BUTTON_HELP = "❓ Help"
BUTTON_JOIN = "Join #{group_id}"
BUTTON_DETAILS = "Details #{group_id}"
BUTTON_GROUP_STATUS = "Status #{group_id}"
BUTTON_CONTRIBUTE_TO = "Contribute #{group_id}"

# ============================================================
# ERROR HANDLING
# ============================================================

CHAIN_ERROR_MESSAGE = "⛓️ I couldn't reach the blockchain right now. Please try again in a moment."
STORAGE_ERROR_MESSAGE = "❌ Something went wrong saving your data. Please try again."
GENERIC_ERROR_MESSAGE = "❌ Something went wrong. Please try again or type /start."
UNKNOWN_ACTION_MESSAGE = "🤔 I didn't understand that. Type /help to see what I can do."
