"""Wallet connection endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from unikron.chains import get_network_by_chain_id, shorten_address
from unikron.errors import WalletError, WalletRejectionError
from unikron.web.contracts.wallet import WalletConnectResponse
from unikron.web.dependencies import get_session
from unikron.web.session import Session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wallet", tags=["wallet"])


@router.post("/connect", response_model=WalletConnectResponse)
async def connect_wallet(session: Session = Depends(get_session)) -> WalletConnectResponse:
    """Request accounts and the current chain from the session's wallet."""
    try:
        accounts = await session.wallet.request_accounts()
        chain_id = await session.wallet.get_chain_id()
    except WalletRejectionError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except WalletError as e:
        logger.error(f"Wallet connection failed: {e}")
        raise HTTPException(status_code=502, detail=e.message)

    address = accounts[0] if accounts else None
    network = get_network_by_chain_id(chain_id)
    return WalletConnectResponse(
        wallet=session.wallet.name,
        accounts=accounts,
        address=address,
        address_short=shorten_address(address) if address else None,
        chain_id=chain_id,
        network=network.id if network else None,
    )
