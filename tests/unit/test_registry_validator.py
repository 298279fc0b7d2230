from datetime import date

import pytest

from judicial_monitor.registry.exceptions import MalformedPayloadError
from judicial_monitor.registry.models import FetchedActuation, Party
from judicial_monitor.registry.validator import (
    build_actuations,
    build_parties,
    build_snapshot,
    optional_str,
    parse_date,
    parse_parties_summary,
    require_list,
    require_object,
)


class TestPrimitives:
    def test_require_object_rejects_list(self) -> None:
        with pytest.raises(MalformedPayloadError, match="must be an object"):
            require_object([], "Response")

    def test_require_list_treats_null_as_empty(self) -> None:
        assert require_list(None, "actuaciones") == []

    def test_require_list_rejects_string(self) -> None:
        with pytest.raises(MalformedPayloadError, match="must be a list"):
            require_list("x", "actuaciones")

    def test_optional_str_strips_and_blanks_to_none(self) -> None:
        assert optional_str("  Juzgado 1  ", "despacho") == "Juzgado 1"
        assert optional_str("   ", "despacho") is None

    def test_optional_str_rejects_number(self) -> None:
        with pytest.raises(MalformedPayloadError):
            optional_str(12, "despacho")


class TestParseDate:
    @pytest.mark.parametrize(
        "raw",
        ["2024-03-15", "2024-03-15T00:00:00", "15/03/2024", "15-03-2024", "2024/03/15"],
    )
    def test_accepts_known_formats(self, raw: str) -> None:
        assert parse_date(raw, "fecha") == date(2024, 3, 15)

    def test_null_is_none(self) -> None:
        assert parse_date(None, "fecha") is None

    def test_garbage_raises(self) -> None:
        with pytest.raises(MalformedPayloadError, match="not a valid date"):
            parse_date("ayer", "fecha")


class TestBuildActuations:
    def test_builds_actuations(self) -> None:
        raw = [
            {
                "fechaActuacion": "2024-03-15T00:00:00",
                "actuacion": "Fijación estado",
                "anotacion": " Actuación registrada ",
                "fechaInicial": "2024-03-16T00:00:00",
                "fechaFinal": None,
            }
        ]

        result = build_actuations(raw)

        assert result == [
            FetchedActuation(
                actuation_date=date(2024, 3, 15),
                actuation_type="Fijación estado",
                annotation="Actuación registrada",
                start_date=date(2024, 3, 16),
            )
        ]

    def test_missing_annotation_becomes_empty(self) -> None:
        result = build_actuations([{"fechaActuacion": "2024-03-15", "actuacion": "Auto"}])

        assert result[0].annotation == ""

    def test_skips_undated_entries(self) -> None:
        raw = [{"fechaActuacion": None, "actuacion": "x"}, {"fechaActuacion": "2024-01-02"}]

        assert len(build_actuations(raw)) == 1

    def test_custom_start_end_fields(self) -> None:
        raw = [{"fechaActuacion": "2024-01-02", "fechaInicia": "2024-01-03"}]

        result = build_actuations(raw, start_field="fechaInicia", end_field="fechaFinaliza")

        assert result[0].start_date == date(2024, 1, 3)

    def test_non_object_entry_raises(self) -> None:
        with pytest.raises(MalformedPayloadError, match="index 0"):
            build_actuations(["not an object"])


class TestParties:
    def test_build_parties(self) -> None:
        raw = [{"nombre": "ANA", "tipoSujeto": "DEMANDANTE"}, {"nombre": None}]

        assert build_parties(raw) == [Party(name="ANA", role="DEMANDANTE")]

    def test_parse_parties_summary(self) -> None:
        raw = "Demandante: ACME S.A. | Demandado: JUAN PEREZ | sin separador"

        assert parse_parties_summary(raw) == [
            Party(name="ACME S.A.", role="Demandante"),
            Party(name="JUAN PEREZ", role="Demandado"),
        ]


class TestBuildSnapshot:
    def test_derives_most_recent_from_actuations(self) -> None:
        actuations = [
            FetchedActuation(date(2024, 1, 1), "Primero"),
            FetchedActuation(date(2024, 3, 1), "Último"),
            FetchedActuation(date(2024, 3, 1), "Empate"),
        ]

        snapshot = build_snapshot(forum="J1", actuations=actuations)

        assert snapshot.found is True
        assert snapshot.most_recent_date == date(2024, 3, 1)
        assert snapshot.most_recent_type == "Último"

    def test_explicit_most_recent_wins(self) -> None:
        snapshot = build_snapshot(
            forum=None,
            actuations=[],
            most_recent_date=date(2023, 12, 1),
        )

        assert snapshot.most_recent_date == date(2023, 12, 1)
        assert snapshot.most_recent_type is None

    def test_plaintiff_and_defendant_from_roles(self) -> None:
        snapshot = build_snapshot(
            forum=None,
            actuations=[],
            parties=[Party("B", "Demandado"), Party("A", "Demandante")],
        )

        assert snapshot.plaintiff == "A"
        assert snapshot.defendant == "B"
