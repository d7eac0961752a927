# Reference data
from military_assets.models.bases.base_models import MilitaryBase, CommanderHandover
from military_assets.models.assets.asset_type_models import AssetType
from military_assets.models.assets.asset_models import Asset

# Ledger
from military_assets.models.inventory.asset_balance_models import AssetBalance
from military_assets.models.inventory.asset_movement_models import AssetMovement

# Workflows
from military_assets.models.inventory.purchase_models import Purchase
from military_assets.models.inventory.transfer_models import Transfer
from military_assets.models.inventory.expenditure_models import Expenditure
from military_assets.models.assignments.assignment_models import Assignment

# Users and auth
from military_assets.models.users.user_models import User, RefreshToken
from military_assets.models.support.activity_models import UserActivity
