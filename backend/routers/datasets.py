from fastapi import APIRouter

from db import DATA_DIR, get_db
from queries.datasets import fetch_dataset_list, fetch_dataset_overview

router = APIRouter()


@router.get("/api/datasets")
def list_datasets():
    return {"datasets": fetch_dataset_list(DATA_DIR)}


@router.get("/api/datasets/{dataset_id}/overview")
def dataset_overview(dataset_id: str):
    conn = get_db(dataset_id)
    result = fetch_dataset_overview(conn)
    conn.close()
    return {"dataset_id": dataset_id, **result}
