from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, StringConstraints, field_validator, model_validator

from cotizador.dto import Dimensions, QuoteRequest, QuoteResult
from cotizador.ports import QuoteError


# ---------- Types with restrictions ----------
NonEmptyTrimmedStr = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1)
]

PositiveDecimal = Annotated[Decimal, Field(gt=0)]
NonNegativeDecimal = Annotated[Decimal, Field(ge=0)]


# ---------- Enums ----------
class ParcelType(str, Enum):
    """
    Tipo de embalaje ofrecido por el formulario.
    """
    CAJA = "caja"
    BOLSA = "bolsa"
    PALLET = "pallet"
    OTRO = "otro"


class ErrorCode(str, Enum):
    """
    Enum for error codes. Mirrors QuoteError.code.
    """
    INVALID_INPUT = "INVALID_INPUT"  # 422
    NO_ROUTE_AVAILABLE = "NO_ROUTE_AVAILABLE"  # 404
    WEIGHT_OUT_OF_RANGE = "WEIGHT_OUT_OF_RANGE"  # 422
    POLICY_NOT_CONFIGURED = "POLICY_NOT_CONFIGURED"  # 500


HTTP_STATUS = {
    ErrorCode.INVALID_INPUT: 422,
    ErrorCode.NO_ROUTE_AVAILABLE: 404,
    ErrorCode.WEIGHT_OUT_OF_RANGE: 422,
    ErrorCode.POLICY_NOT_CONFIGURED: 500,
}


# ---------- Request ----------
class QuoteRequestModel(BaseModel):
    """
    Cuerpo de solicitud para POST /cotizar
    """
    origen: NonEmptyTrimmedStr = Field(..., description="Ciudad de origen (texto libre).")
    destino: NonEmptyTrimmedStr = Field(..., description="Ciudad de destino (texto libre).")
    peso: PositiveDecimal = Field(..., description="Peso físico declarado en kg (> 0).")
    largo: Optional[PositiveDecimal] = Field(None, description="Largo en cm (opcional).")
    ancho: Optional[PositiveDecimal] = Field(None, description="Ancho en cm (opcional).")
    alto: Optional[PositiveDecimal] = Field(None, description="Alto en cm (opcional).")
    valor_declarado: Optional[NonNegativeDecimal] = Field(
        None, description="Valor declarado en CLP (>= 0, opcional)."
    )
    forma_pago: Optional[NonEmptyTrimmedStr] = Field(None, description="Filtro de forma de pago.")
    tipo_encomienda: Optional[ParcelType] = Field(None, description="Tipo de embalaje.")

    @field_validator("forma_pago", mode="before")
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        # El formulario envía "" cuando no se selecciona nada
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    @model_validator(mode="after")
    def all_or_no_dimensions(self) -> "QuoteRequestModel":
        present = [d for d in (self.largo, self.ancho, self.alto) if d is not None]
        if present and len(present) != 3:
            raise ValueError("Se requieren largo, ancho y alto, o ninguna medida.")
        return self

    def to_request(self, evaluation_instant: Optional[datetime] = None) -> QuoteRequest:
        dimensions = None
        if self.largo is not None:
            dimensions = Dimensions(self.largo, self.ancho, self.alto)
        return QuoteRequest(
            origin=self.origen,
            destination=self.destino,
            weight=self.peso,
            dimensions=dimensions,
            declared_value=self.valor_declarado,
            payment_form=self.forma_pago,
            parcel_type=self.tipo_encomienda.value if self.tipo_encomienda else None,
            evaluation_instant=evaluation_instant,
        )

    model_config = {
        "json_schema_extra": {
            "example": {
                "origen": "santiago",
                "destino": "valparaiso",
                "peso": "3",
                "largo": "30",
                "ancho": "20",
                "alto": "10",
                "valor_declarado": "25000",
                "tipo_encomienda": "caja",
            }
        }
    }


# ---------- Response 200 ----------
class QuoteMatchModel(BaseModel):
    """
    Bloque `match`: ruta normalizada y pesos usados.
    """
    origen: str
    destino: str
    pesoSolicitado: Decimal = Field(..., description="Peso físico declarado (kg).")
    pesoVolumetrico: Decimal = Field(..., description="Peso volumétrico (kg), 0 sin medidas.")
    pesoFacturable: Decimal = Field(..., description="max(pesoSolicitado, pesoVolumetrico).")
    tramoDesde: Decimal = Field(..., description="pesoInicial del tramo elegido.")
    bucketSeleccionado: Decimal = Field(..., description="pesoFinal del tramo elegido.")


class QuoteResultadoModel(BaseModel):
    """
    Bloque `resultado`: la tarifa elegida y la fecha de compromiso.
    """
    tarifa_id: str
    tarifa_pullman_nueva: Decimal
    tipo_servicio: str
    tipo_entrega: str
    nombre_tarifa: str
    fecha_compromiso: datetime
    tipo_encomienda: Optional[str] = None
    lugar_entrega: Optional[str] = None
    formas_pago: List[str] = Field(default_factory=list)
    valor_declarado: Optional[Decimal] = None
    version_politica: str = ""


class QuoteResponse(BaseModel):
    """
    Cuerpo de respuesta exitoso (200 OK) de POST /cotizar
    """
    match: QuoteMatchModel
    resultado: QuoteResultadoModel

    @classmethod
    def from_result(cls, result: QuoteResult) -> "QuoteResponse":
        m = result.match
        return cls(
            match=QuoteMatchModel(
                origen=m.origin,
                destino=m.destination,
                pesoSolicitado=m.requested_weight,
                pesoVolumetrico=m.volumetric_weight,
                pesoFacturable=m.billable_weight,
                tramoDesde=m.band_from,
                bucketSeleccionado=m.band_to,
            ),
            resultado=QuoteResultadoModel(
                tarifa_id=result.rule_id,
                tarifa_pullman_nueva=result.price,
                tipo_servicio=result.service_type,
                tipo_entrega=result.delivery_type,
                nombre_tarifa=result.fare_name,
                fecha_compromiso=result.commitment_date,
                tipo_encomienda=result.parcel_type,
                lugar_entrega=result.delivery_place,
                formas_pago=sorted(result.payment_forms),
                valor_declarado=result.declared_value,
                version_politica=result.policy_version,
            ),
        )


# ---------- Error responses (404, 422, 500) ----------
class ErrorResponse(BaseModel):
    """
    Estructura base de error de cotización.
    """
    error: ErrorCode = Field(..., description="Código de error estandarizado.")
    message: NonEmptyTrimmedStr = Field(..., description="Descripción legible del error.")
    stage: Optional[str] = Field(None, description="Etapa en que se rechazó la cotización.")
    field: Optional[str] = Field(None, description="Campo inválido, si aplica.")

    @classmethod
    def from_error(cls, error: QuoteError) -> "ErrorResponse":
        return cls(
            error=ErrorCode(error.code),
            message=error.message,
            stage=error.stage,
            field=getattr(error, "field", None),
        )

    @property
    def http_status(self) -> int:
        return HTTP_STATUS[self.error]

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "NO_ROUTE_AVAILABLE",
                    "message": "No hay tarifa activa para SANTIAGO -> PUNTA ARENAS al 2025-09-01T10:00:00-03:00",
                    "stage": "NORMALIZED",
                },
                {
                    "error": "WEIGHT_OUT_OF_RANGE",
                    "message": "Peso facturable 12.8 kg fuera de los tramos disponibles: [0, 10]",
                    "stage": "FILTERED",
                },
            ]
        }
    }


__all__ = [
    "ParcelType",
    "ErrorCode",
    "HTTP_STATUS",
    "QuoteRequestModel",
    "QuoteMatchModel",
    "QuoteResultadoModel",
    "QuoteResponse",
    "ErrorResponse",
    "NonEmptyTrimmedStr",
]

# This file defines the data models used in the service contract for shipping quotes.
# It includes request and response schemas (the `match` / `resultado` layout the web form consumes),
# the error code enum with its HTTP status mapping, and constrained numeric types.
# The models are designed to be used with Pydantic for data validation and serialization.
