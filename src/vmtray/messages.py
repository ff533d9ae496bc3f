"""
User-visible strings.

Format fields: "{0}" in the state templates is a state label, "{name}" in
the single-VM messages is the virtual machine name.
"""

APPLICATION_NAME = "VM Tray"

# States
STATE_OFF = "Off"
STATE_RUNNING = "Running"
STATE_SAVED = "Saved"
STATE_PAUSED = "Paused"
STATE_RESETTING = "Resetting"
STATE_STARTING = "Starting"
STATE_STOPPING = "Stopping"
STATE_SAVING = "Saving"
STATE_PAUSING = "Pausing"
STATE_RESUMING = "Resuming"
STATE_UNKNOWN = "Unknown"
STATE_CRITICAL = "{0} (Critical)"

UNKNOWN_VIRTUAL_MACHINE = "Unknown Virtual Machine"
TOAST_CRITICAL_STATE = "A virtual machine has entered a critical state."

# Commands
COMMAND_START = "Start"
COMMAND_TURN_OFF = "Turn Off"
COMMAND_SHUT_DOWN = "Shut Down"
COMMAND_SAVE = "Save"
COMMAND_PAUSE = "Pause"
COMMAND_RESUME = "Resume"
COMMAND_RESET = "Reset"
MENU_ALL_VIRTUAL_MACHINES = "All Virtual Machines"

# Failures, one virtual machine
MESSAGE_START_VM_FAILED = "Failed to start virtual machine '{name}'."
MESSAGE_POWER_OFF_VM_FAILED = "Failed to turn off virtual machine '{name}'."
MESSAGE_SHUT_DOWN_VM_FAILED = "Failed to shut down virtual machine '{name}'."
MESSAGE_SAVE_STATE_VM_FAILED = "Failed to save the state of virtual machine '{name}'."
MESSAGE_PAUSE_VM_FAILED = "Failed to pause virtual machine '{name}'."
MESSAGE_RESUME_VM_FAILED = "Failed to resume virtual machine '{name}'."
MESSAGE_RESET_VM_FAILED = "Failed to reset virtual machine '{name}'."

# Failures, all virtual machines
MESSAGE_START_VM_FAILED_MULTIPLE = "Failed to start one or more virtual machines."
MESSAGE_POWER_OFF_VM_FAILED_MULTIPLE = "Failed to turn off one or more virtual machines."
MESSAGE_SHUT_DOWN_VM_FAILED_MULTIPLE = "Failed to shut down one or more virtual machines."
MESSAGE_SAVE_STATE_VM_FAILED_MULTIPLE = "Failed to save the state of one or more virtual machines."
MESSAGE_PAUSE_VM_FAILED_MULTIPLE = "Failed to pause one or more virtual machines."
MESSAGE_RESUME_VM_FAILED_MULTIPLE = "Failed to resume one or more virtual machines."
MESSAGE_RESET_VM_FAILED_MULTIPLE = "Failed to reset one or more virtual machines."

# Confirmations
TITLE_TURN_OFF_MACHINE = "Turn Off Machine"
TITLE_SHUT_DOWN_MACHINE = "Shut Down Machine"
TITLE_RESET_MACHINE = "Reset Machine"

BUTTON_TURN_OFF = "Turn Off"
BUTTON_DONT_TURN_OFF = "Don't Turn Off"
BUTTON_SHUT_DOWN = "Shut Down"
BUTTON_DONT_SHUT_DOWN = "Don't Shut Down"
BUTTON_RESET = "Reset"
BUTTON_DONT_RESET = "Don't Reset"

MESSAGE_CONFIRMATION_TURN_OFF = (
    "Do you want to turn off the virtual machine? "
    "Turning off the virtual machine is similar to removing power from a "
    "computer, and any unsaved data will be lost."
)
MESSAGE_CONFIRMATION_TURN_OFF_MULTIPLE = (
    "Do you want to turn off the selected virtual machines? "
    "Turning off a virtual machine is similar to removing power from a "
    "computer, and any unsaved data will be lost."
)
MESSAGE_CONFIRMATION_SHUT_DOWN = (
    "Do you want to shut down the virtual machine? "
    "The guest operating system will be asked to shut down."
)
MESSAGE_CONFIRMATION_SHUT_DOWN_MULTIPLE = (
    "Do you want to shut down the selected virtual machines? "
    "Each guest operating system will be asked to shut down."
)
MESSAGE_CONFIRMATION_RESET = (
    "Do you want to reset the virtual machine? "
    "Any unsaved data in the virtual machine will be lost."
)
MESSAGE_CONFIRMATION_RESET_MULTIPLE = (
    "Do you want to reset the selected virtual machines? "
    "Any unsaved data in these virtual machines will be lost."
)
