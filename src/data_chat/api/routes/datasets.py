"""Dataset catalogue API routes.

Endpoints:
- GET /api/datasets - List configured datasets
- GET /api/datasets/{dataset_id}/profile - Profile of one dataset (loads it on first access)
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, status

from data_chat.api.dependencies import RegistryDep
from data_chat.api.models import schemas

router = APIRouter()


@router.get("/datasets", response_model=schemas.DatasetListResponse)
def list_datasets(registry: RegistryDep) -> schemas.DatasetListResponse:
    """List the configured datasets and whether they are loaded yet."""
    return schemas.DatasetListResponse(
        datasets=[schemas.DatasetInfo(**entry) for entry in registry.list_datasets()]
    )


@router.get("/datasets/{dataset_id}/profile", response_model=schemas.DatasetProfileResponse)
def get_dataset_profile(
    dataset_id: Annotated[str, Path(..., description="Dataset ID")],
    registry: RegistryDep,
) -> schemas.DatasetProfileResponse:
    """Get the profile of a dataset.

    Raises:
        HTTPException: 404 if the dataset is not configured or its file is missing
    """
    try:
        dataset = registry.get(dataset_id)
    except KeyError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Dataset '{dataset_id}' not found",
        ) from e
    except FileNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Dataset '{dataset_id}' not found: {e}",
        ) from e

    return schemas.DatasetProfileResponse(
        dataset_id=dataset.dataset_id,
        display_name=dataset.display_name,
        period=dataset.period,
        profile=dataset.profile.to_dict() if dataset.profile else None,
    )
