from fastapi import APIRouter, Depends

from storefront.api.deps import get_current_user
from storefront.api.responses import ok
from storefront.core.permissions import Identity

router = APIRouter()


@router.get("/me")
def me(user: Identity = Depends(get_current_user)):
    return ok(user, "Current user")
