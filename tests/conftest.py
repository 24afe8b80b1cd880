import pytest

from helpers import ACCT2, DEPLOYER
from nft_grid.ledger import Balances, NFTContract
from nft_grid.project_constants import WEI_PER_ETHER


@pytest.fixture
def balances() -> Balances:
    b = Balances()
    b.credit(DEPLOYER, 10 * WEI_PER_ETHER)
    b.credit(ACCT2, 10 * WEI_PER_ETHER)
    return b


@pytest.fixture
def nft(balances: Balances) -> NFTContract:
    return NFTContract(DEPLOYER, balances=balances)
