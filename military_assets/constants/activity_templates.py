from military_assets.constants.activity_codes import ActivityCode


ACTIVITY_TEMPLATES = {
    # ---------------- AUTH ----------------
    ActivityCode.LOGIN:
        "{actor_role} ({actor_username}) logged in",

    ActivityCode.LOGOUT:
        "{actor_role} ({actor_username}) logged out",

    # ---------------- USERS ----------------
    ActivityCode.CREATE_USER:
        "{actor_role} ({actor_username}) created user {target_username} with role {target_role}",

    ActivityCode.UPDATE_USER:
        "{actor_role} ({actor_username}) updated user {target_username}: {changes}",

    ActivityCode.DEACTIVATE_USER:
        "{actor_role} ({actor_username}) deactivated user {target_username}",

    # ---------------- BASES ----------------
    ActivityCode.CREATE_BASE:
        "{actor_role} ({actor_username}) created base {base_name} ({base_code})",

    ActivityCode.UPDATE_BASE:
        "{actor_role} ({actor_username}) updated base {base_code}: {changes}",

    ActivityCode.ACTIVATE_BASE:
        "{actor_role} ({actor_username}) activated base {base_code}",

    ActivityCode.DEACTIVATE_BASE:
        "{actor_role} ({actor_username}) deactivated base {base_code}",

    ActivityCode.COMMANDER_HANDOVER:
        "{actor_role} ({actor_username}) handed command of base {base_code} to {new_commander}",

    # ---------------- CATALOG / ASSETS ----------------
    ActivityCode.CREATE_ASSET_TYPE:
        "{actor_role} ({actor_username}) created asset type {target_name} ({category})",

    ActivityCode.UPDATE_ASSET_TYPE:
        "{actor_role} ({actor_username}) updated asset type {target_name}: {changes}",

    ActivityCode.REGISTER_ASSET:
        "{actor_role} ({actor_username}) registered asset {serial_number} of type {asset_type_name} at base {base_code}",

    ActivityCode.UPDATE_ASSET:
        "{actor_role} ({actor_username}) updated asset {serial_number}: {changes}",

    # ---------------- WORKFLOWS ----------------
    ActivityCode.CREATE_PURCHASE:
        "{actor_role} ({actor_username}) purchased {quantity} x {asset_type_name} for base {base_code}",

    ActivityCode.CREATE_TRANSFER:
        "{actor_role} ({actor_username}) requested transfer {tracking_number} of {quantity} x {asset_type_name} from {from_base} to {to_base}",

    ActivityCode.UPDATE_TRANSFER_STATUS:
        "{actor_role} ({actor_username}) moved transfer {tracking_number} from {old_status} to {new_status}",

    ActivityCode.CREATE_ASSIGNMENT:
        "{actor_role} ({actor_username}) assigned asset {serial_number} to {assignee}",

    ActivityCode.UPDATE_ASSIGNMENT_STATUS:
        "{actor_role} ({actor_username}) marked assignment of asset {serial_number} as {new_status}",

    ActivityCode.CREATE_EXPENDITURE:
        "{actor_role} ({actor_username}) expended {quantity} x {asset_type_name} at base {base_code}: {reason}",
}
