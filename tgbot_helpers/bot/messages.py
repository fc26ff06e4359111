"""Telegram bot message templates and constants.

Contains the default replies of the access-control pipeline and the texts
of the default commands. Denial messages can be overridden through the
configuration.
"""

# Access control
DEFAULT_ACCESS_DENIED_MESSAGE = "You dont have access to this command."
DEFAULT_COMMAND_DEACTIVATED_MESSAGE = "This command has been deactivated."
DEFAULT_PRIVATE_ONLY_MESSAGE = "The command can only be used in a private chat."

# Bot lifecycle
BOT_INITIALIZED = (
    "{username} initialized with {commands} commands, {groups} groups and {variables} variables."
)
UNDEFINED_ERROR = "Undefined error"
MESSAGE_TOO_LONG = "Message to chat {chat_id} too long ({length} characters)..."
SEND_FAILED = "Failed to send message to chat {chat_id}: {error}"

# Default command descriptions
UPTIME_DESCRIPTION = "Get the bot and system uptime."
IP_DESCRIPTION = "Get the IP of the system."
DEACTIVATE_DESCRIPTION = "Deactivates or reactivates a given command."
VAR_DESCRIPTION = 'See all available variables. Set variables with "/var &lt;number&gt; &lt;value&gt;".'
GROUPS_DESCRIPTION = "Gives the members of a specific group."
CHAT_INFO_DESCRIPTION = "Gives info about a certain chat that uses the bot."
BAN_DESCRIPTION = "Ban users."

# Uptime and IP
UPTIME_MESSAGE = "<b>Bot uptime</b>: <i>{bot_uptime}</i>\n<b>OS uptime</b>: <i>{os_uptime}</i>"
NO_IP_ADDRESSES = "No IP addresses found."

# Command listings
COMMANDS_HEADER_GROUP = "<b>Commands accessible to group <i>{group}</i>:</b>"
COMMANDS_HEADER_EVERYBODY = "<b>Commands accessible to everybody:</b>"

# Variables
VARIABLES_HEADER = "<b>Available variables:</b>"
VARIABLE_NOT_FOUND = "Variable {index} does not exist."
VARIABLE_VALUE = "Variable {index}: <code>{value}</code>"
VARIABLE_REJECTED = "Value <code>{value}</code> is not valid for variable {index}."

# Deactivation
DEACTIVATE_USAGE = 'Use "/{command} &lt;command&gt;" to deactivate/activate certain commands.'
NO_DEACTIVATED_COMMANDS = "No deactivated commands found."
DEACTIVATED_COMMANDS_HEADER = "<b>Deactivated commands:</b>"
COMMAND_REACTIVATED = "Command {command} has been reactivated!"
COMMAND_TOGGLED = "Command {command} has been {state}!"
DEACTIVATE_INVALID = "Number not correct, or command not starting with '/'."

# Groups and membership
INIT_ADDED = "You have been added to group <i>{group}</i>!"
INIT_REFUSED = "No, I don't think so."
REQUEST_HEADER = "<b>Request for group <i>{group}</i>:</b>"
TOGGLE_USAGE = "Use /{command}_CHATID to toggle CHATID for group <i>{group}</i>. Current users in group:"
CHAT_ADDED = "Chat {chat_id} has been added to group <i>{group}</i>."
CHAT_REMOVED = "Chat {chat_id} has been removed from group <i>{group}</i>."
NEW_USER_HEADER = "<b>A new user have used the /{command} command</b>"
GROUP_TOGGLES_HEADER = "Group toggles:"
NO_CHATS_IN_GROUP = "No chats in group <i>{group}</i>."
CHATS_IN_GROUP_HEADER = "<b>Chats in group <i>{group}</i></b>:"
AVAILABLE_GROUPS_HEADER = "<b>Available groups</b>:"
NO_GROUPS = "No groups available..."
CHAT_INFO_USAGE = "Use /{command}_CHATID to see info about a user."
CHAT_INFO_HEADER = "<b>User/chat info</b>"

# Sending on behalf of operators
NO_TEXT_PROVIDED = "No text provided..."
NO_CHAT_ID = "No chat ID found within the command..."
MESSAGE_SENT_TO_CHAT = "Message sent to chat {chat_id}!"
CHAT_NOT_AVAILABLE = "No chat with ID {chat_id} is available to the bot..."
MESSAGE_SENT_TO_GROUP = "Message sent to group <i>{group}</i>!"

# Logs
NO_LOG_FILES = "No log files found."
LOG_FILE_EMPTY = "File {path} is empty."
AVAILABLE_LOGS_HEADER = "<b>Available logs</b>"
