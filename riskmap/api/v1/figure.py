"""Risk map endpoints - current figure, age weight control, baseline reload"""

import logging
from fastapi import APIRouter, Depends, Request

from riskmap.api.v1.schemas import AgeWeightRequest, FigureResponse
from riskmap.api.dependencies import get_controller, get_request_id
from riskmap.controller import ViewController, ViewSnapshot
from riskmap.infrastructure.rendering.plotly_figure import to_plotly_json

router = APIRouter()


def _figure_response(snapshot: ViewSnapshot) -> FigureResponse:
    return FigureResponse(
        status=snapshot.status.value,
        age_weight=snapshot.weight,
        point_count=snapshot.figure.point_count,
        title=snapshot.figure.title,
        error=str(snapshot.last_error) if snapshot.last_error else None,
        figure=to_plotly_json(snapshot.figure),
    )


@router.get("/figure", response_model=FigureResponse)
def get_figure(controller: ViewController = Depends(get_controller)):
    """Latest figure; stays on the last good figure while fetches are pending or failed"""
    return _figure_response(controller.snapshot())


@router.put("/age-weight", response_model=FigureResponse)
async def update_age_weight(
    request_body: AgeWeightRequest,
    request: Request,
    controller: ViewController = Depends(get_controller),
):
    """
    Set the age weight and wait for the recomputed figure.

    Fetch failures are reported in the body; the previous figure is kept.
    """
    await controller.set_weight(request_body.age_weight)

    snapshot = controller.snapshot()
    if snapshot.last_error is not None:
        logging.warning(
            f"Age weight update kept previous figure: {snapshot.last_error}",
            extra={"request_id": get_request_id(request), "age_weight": request_body.age_weight},
        )
    return _figure_response(snapshot)


@router.post("/reload", response_model=FigureResponse)
async def reload_baseline(controller: ViewController = Depends(get_controller)):
    """Fetch the baseline applicants again, e.g. after a failed startup"""
    await controller.reload()
    return _figure_response(controller.snapshot())
