# app.py

import io
import logging
from xml.sax.saxutils import escape

import dash
import dash_daq as daq
import pandas as pd
import plotly.graph_objects as go
import plotly.io as pio
from dash import ALL, Input, Output, State, dcc, html
from pptx import Presentation
from pptx.util import Inches
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
# PDF export (with embedded chart images)
from reportlab.platypus import Image as RLImage
from reportlab.platypus import (ListFlowable, ListItem, Paragraph,
                                SimpleDocTemplate, Spacer, Table, TableStyle)

import config
from config import (DEFAULT_SCORE, DIMENSION_LABELS, DIMENSIONS, LEVEL_BANDS,
                    QUESTIONS, SCALE_CAPTIONS, SCALE_MAX, SCALE_MIN)
from scoring import (AnswerSet, ReadinessError, classify, overall_score,
                     questions_by_dimension, radar_series, validate_catalog)

logger = logging.getLogger(__name__)

TITLE = "Readiness Radar - Defence Readiness"

app = dash.Dash(__name__, suppress_callback_exceptions=True)
app.title = TITLE
server = app.server


def _validate_config() -> None:
    """Log a warning for every problem found in the question catalog."""
    for problem in validate_catalog(QUESTIONS):
        logger.warning("[config warning] %s", problem)


_validate_config()


# ----------- Helpers -------------
def _band_ranges():
    """
    Yield (range text, label, interpretation) for every level band.

    The first band starts at 0; every other band starts just above the
    previous upper bound.
    """
    lower = 0.0
    for upper, label, meaning in LEVEL_BANDS:
        yield f"{lower:g}-{upper:g}", label, meaning
        lower = upper


def _ordered_questions():
    # Same order as the cards in the layout, which is the order Dash uses for ALL outputs.
    return [q for qs in questions_by_dimension().values() for q in qs]


# for chart sizes
RADAR_H = 380
BAR_H = 300


def _base_fig_layout(fig, theme="light", height=360):
    """
    Apply a consistent layout to a figure.

    This sets the font to a contrasting color for light/dark themes,
    and sets the grid color to a contrasting color. It also sets the
    axis colors to match the text color.

    :param fig: a figure to update
    :param theme: a string, either "light" or "dark"
    :param height: the height of the figure in pixels
    :return: the updated figure
    """

    font_color = "#f6f7fb" if theme == "dark" else "#0b1020"
    grid_color = "#334155" if theme == "dark" else "#CBD5E1"
    fig.update_layout(
        autosize=False,
        height=height,
        margin=dict(l=40, r=40, t=30, b=30),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=font_color),
        xaxis=dict(
            showgrid=True,
            gridcolor=grid_color,
            zeroline=False,
            linecolor=font_color,
            fixedrange=True,
        ),
        yaxis=dict(
            showgrid=True,
            gridcolor=grid_color,
            zeroline=False,
            linecolor=font_color,
            fixedrange=True,
        ),
        showlegend=False,
        uirevision="keep",
    )
    return fig


# -------------- Layout --------------------
def _question_row(q):
    return html.Div(
        [
            html.Div(
                [
                    html.Span(q.text),
                    html.Span(
                        str(DEFAULT_SCORE),
                        id={"type": "q-value", "qid": q.id},
                        className="question-value",
                    ),
                ],
                className="question-label",
            ),
            dcc.Slider(
                id={"type": "q-input", "qid": q.id},
                min=SCALE_MIN,
                max=SCALE_MAX,
                step=1,
                value=DEFAULT_SCORE,
                marks={i: str(i) for i in range(SCALE_MIN, SCALE_MAX + 1)},
            ),
            html.Div(
                [html.Span(SCALE_CAPTIONS[SCALE_MIN]), html.Span(SCALE_CAPTIONS[SCALE_MAX])],
                className="question-scale",
            ),
        ],
        className="question",
    )


def build_dimension_cards():
    """
    Build one card per dimension with its score, level badge and a slider
    per question.

    :return: a list of HTML Div elements, one per dimension
    """
    cards = []
    for dim, qlist in questions_by_dimension().items():
        header = html.Div(
            [
                html.H2(DIMENSION_LABELS[dim]),
                html.Div(
                    [
                        html.Span(
                            [
                                "Average score: ",
                                html.Strong("0.00", id={"type": "dim-score", "dim": dim.value}),
                            ]
                        ),
                        html.Span(
                            classify(0),
                            id={"type": "dim-badge", "dim": dim.value},
                            className="badge",
                        ),
                    ],
                    className="score-info",
                ),
            ],
            className="card-header",
        )
        cards.append(
            html.Div(
                [header, html.Div([_question_row(q) for q in qlist], className="questions")],
                className=f"card d-{dim.value}",
            )
        )
    return cards


def build_legend():
    return html.Div(
        [
            html.H3("Quick interpretation"),
            html.Ul(
                [
                    html.Li([html.Strong(rng), f" - {label}: {meaning}"])
                    for rng, label, meaning in _band_ranges()
                ],
                className="legend-list",
            ),
        ],
        className="card",
    )


def _graph(graph_id, height):
    return dcc.Graph(
        id=graph_id,
        style={"height": f"{height}px"},
        config={"responsive": False, "displaylogo": False, "scrollZoom": False},
    )


def _field(label, input_id, placeholder):
    return html.Div(
        [
            html.Label(label),
            dcc.Input(id=input_id, placeholder=placeholder, className="textin"),
        ],
        className="field",
    )


app.layout = html.Div(
    id="page-root",
    className="page theme-light",
    children=[
        dcc.Store(id="answers-store"),
        dcc.Store(id="theme-store", data="light"),
        # Header
        html.Div(
            [
                html.H1(TITLE),
                html.P(
                    "Rate your company on five key dimensions and see its readiness "
                    "level on a radar chart."
                ),
                html.Div(
                    [
                        _field("Organization", "org-name", "e.g., Acme Systems"),
                        _field("Assessor", "assessor", "Your name"),
                        _field("Sector", "sector", "e.g., Aerospace"),
                        html.Div(
                            [
                                html.Label("Dark mode"),
                                daq.BooleanSwitch(
                                    id="theme-switch",
                                    on=False,
                                    color="#4f46e5",
                                    className="theme-switch",
                                ),
                            ],
                            className="field",
                        ),
                    ],
                    className="meta",
                ),
            ],
            className="header",
        ),
        html.Div(
            [
                html.Section(
                    build_dimension_cards()
                    + [
                        html.Button(
                            "Reset answers",
                            id="reset-answers",
                            n_clicks=0,
                            className="secondary",
                        )
                    ],
                    className="form-section",
                ),
                html.Aside(
                    [
                        html.Div(id="kpis", className="kpis"),
                        html.Div(
                            [html.H2("Readiness Radar"), _graph("radar", RADAR_H)],
                            className="card radar-card",
                        ),
                        html.Div([_graph("bar", BAR_H)], className="card"),
                        build_legend(),
                        html.Div(
                            [
                                html.Button(
                                    "Download CSV", id="dl-csv", n_clicks=0, className="secondary"
                                ),
                                dcc.Download(id="dl-csv-out"),
                                html.Button(
                                    "Download PPTX", id="dl-ppt", n_clicks=0, className="secondary"
                                ),
                                dcc.Download(id="dl-ppt-out"),
                                html.Button(
                                    "Download PDF", id="dl-pdf", n_clicks=0, className="secondary"
                                ),
                                dcc.Download(id="dl-pdf-out"),
                            ],
                            className="export-row",
                        ),
                    ],
                    className="sidebar",
                ),
            ],
            className="layout",
        ),
    ],
)


# ---------- Figures (fixed sizes, consistent) ------------------
def radar_figure(series, theme="light"):
    """
    Return a radar figure with one axis per dimension and a fixed [0, 5] scale.

    Args:
        series (RadarSeries): names, values and level labels in display order
        theme (str, optional): light or dark. Defaults to "light".

    Returns:
        go.Figure: radar figure
    """
    cats = list(series.names)
    vals = [float(v) for v in series.values]
    levels = list(series.labels)
    # close the polygon
    cats2, vals2, levels2 = cats + cats[:1], vals + vals[:1], levels + levels[:1]

    grid_color = "#334155" if theme == "dark" else "#CBD5E1"
    fig = go.Figure()
    fig.add_trace(
        go.Scatterpolar(
            r=vals2,
            theta=cats2,
            customdata=levels2,
            fill="toself",
            name="Readiness",
            line=dict(width=2, color="rgba(34,197,94,1)"),
            fillcolor="rgba(34,197,94,0.2)",
            marker=dict(size=5, color="rgba(34,197,94,1)"),
            hovertemplate="%{theta}: %{r:.2f} (%{customdata})<extra></extra>",
        )
    )
    fig.update_layout(
        polar=dict(
            radialaxis=dict(
                range=[0, SCALE_MAX],  # pin the range
                autorange=False,
                tick0=0,
                dtick=1,
                gridcolor=grid_color,
                showline=True,
                linewidth=1,
            ),
            angularaxis=dict(gridcolor=grid_color, showline=True, linewidth=1),
        ),
    )
    return _base_fig_layout(fig, theme, height=RADAR_H)


def bar_figure(series, theme="light"):
    """Bar chart of the same dimension scores, same order and scale as the radar."""
    names = list(series.names)
    fig = go.Figure(
        go.Bar(
            x=names,
            y=[float(v) for v in series.values],
            text=list(series.labels),
            marker_color="rgba(34,197,94,0.8)",
        )
    )
    fig.update_layout(
        xaxis=dict(categoryorder="array", categoryarray=names),
        yaxis=dict(range=[0, SCALE_MAX], tick0=0, dtick=1),
    )
    return _base_fig_layout(fig, theme, height=BAR_H)


# -------------- State & report helpers ---------------
def apply_inputs(ids, values, previous=None):
    """
    Fold slider values into the stored answers.

    Every value goes through AnswerSet.set_answer; a rejected one is logged
    and the question keeps its previous score.

    Args:
        ids (list): slider component ids ({"type": "q-input", "qid": ...})
        values (list): slider values, aligned with `ids`
        previous (dict, optional): answers currently in the store

    Returns:
        dict: question id -> score, ready for the answers store
    """
    try:
        answers = AnswerSet.from_dict(previous)
    except ReadinessError as exc:
        logger.warning("Discarding stored answers: %s", exc)
        answers = AnswerSet()
    for cid, value in zip(ids or [], values or []):
        try:
            answers.set_answer(cid["qid"], value)
        except ReadinessError as exc:
            logger.warning("Rejected answer: %s", exc)
    return answers.to_dict()


def build_report(data, org=None, assessor=None, sector=None):
    """
    Collect everything the results panel and the exports show.

    Returns:
        dict: metadata, per-question responses, the radar series, per-dimension
            scores/levels (keyed by Dimension) and the overall score/level.
    """
    answers = AnswerSet.from_dict(data)
    scores = answers.dimension_scores()
    overall = overall_score(scores)
    return {
        "org": org or "",
        "assessor": assessor or "",
        "sector": sector or "",
        "responses": [
            {
                "id": q.id,
                "dimension": DIMENSION_LABELS[q.dimension],
                "text": q.text,
                "value": answers[q.id],
            }
            for q in answers.catalog
        ],
        "series": radar_series(answers),
        "dimension_scores": scores,
        "levels": {dim: classify(s) for dim, s in scores.items()},
        "overall": overall,
        "overall_level": classify(overall),
    }


def _report_or_prevent(data, org=None, assessor=None, sector=None):
    """build_report for callbacks: an empty or corrupt store means no update."""
    if not data:
        raise dash.exceptions.PreventUpdate
    try:
        return build_report(data, org, assessor, sector)
    except ReadinessError as exc:
        logger.warning("Cannot use stored answers: %s", exc)
        raise dash.exceptions.PreventUpdate


def responses_frame(report):
    return pd.DataFrame(report["responses"], columns=["id", "dimension", "text", "value"])


def _kpi(title, value, level):
    return html.Div(
        [
            html.Div(title, className="kpi-title"),
            html.Div(f"{float(value):.2f}", className="kpi-value"),
            html.Div(level, className="badge"),
        ],
        className="kpi",
    )


# -------- Callbacks ------------------
@app.callback(
    Output("answers-store", "data"),
    Input({"type": "q-input", "qid": ALL}, "value"),
    State({"type": "q-input", "qid": ALL}, "id"),
    State("answers-store", "data"),
)
def on_answer_change(values, ids, previous):
    """
    Store the answers after any slider moves.

    Args:
        values (list): current slider values.
        ids (list): slider ids, aligned with `values`.
        previous (dict): answers currently held in the "answers-store".

    Returns:
        dict: The updated answers.
    """
    return apply_inputs(ids, values, previous)


@app.callback(
    Output({"type": "dim-score", "dim": ALL}, "children"),
    Output({"type": "dim-badge", "dim": ALL}, "children"),
    Output({"type": "q-value", "qid": ALL}, "children"),
    Output("kpis", "children"),
    Output("radar", "figure"),
    Output("bar", "figure"),
    Input("answers-store", "data"),
    Input("theme-store", "data"),
)
def update_results(data, theme):
    """
    Recompute scores, badges, KPIs and charts from the stored answers.

    Args:
        data (dict): The answers, as stored in the "answers-store".
        theme (str): The theme name ("light" or "dark"), as stored in the "theme-store".

    Returns:
        tuple: dimension scores, badges, per-question values, KPIs, radar and bar figures.
    """
    report = _report_or_prevent(data)

    scores, levels = report["dimension_scores"], report["levels"]
    by_id = {r["id"]: r["value"] for r in report["responses"]}
    return (
        [f"{scores[d]:.2f}" for d in DIMENSIONS],
        [levels[d] for d in DIMENSIONS],
        [str(by_id[q.id]) for q in _ordered_questions()],
        [_kpi("Overall readiness", report["overall"], report["overall_level"])],
        radar_figure(report["series"], theme or "light"),
        bar_figure(report["series"], theme or "light"),
    )


@app.callback(
    Output({"type": "q-input", "qid": ALL}, "value"),
    Input("reset-answers", "n_clicks"),
    prevent_initial_call=True,
)
def reset_answers(n):
    """Put every slider back to the default score."""
    if not n:
        raise dash.exceptions.PreventUpdate
    logger.info("Answers reset to defaults")
    return [DEFAULT_SCORE] * len(_ordered_questions())


# Exports
@app.callback(
    Output("dl-csv-out", "data"),
    Input("dl-csv", "n_clicks"),
    State("answers-store", "data"),
    prevent_initial_call=True,
)
def download_csv(_, data):
    """
    Download the answers as a CSV file.

    Args:
        _ (int): Click count of the "Download CSV" button.
        data (dict): The answers, as stored in the "answers-store".

    Returns:
        dict: dcc.Download payload containing the CSV data.
    """
    df = responses_frame(_report_or_prevent(data))
    logger.info("Exporting %d responses to CSV", len(df))
    return dcc.send_data_frame(df.to_csv, "readiness_responses.csv", index=False)


def _write_ppt_bytes(buf, report):
    """
    Write a PowerPoint presentation with the following slides to a bytes buffer.

    1. Title slide with organization, assessor, and sector information.
    2. Summary slide with overall readiness score and method.
    3. Dimension scores table with level labels.
    4. Level interpretation.

    Args:
        buf (BytesIO): A BytesIO object to write the presentation to.
        report (dict): The output of build_report.

    Returns:
        None
    """
    prs = Presentation()
    slide = prs.slides.add_slide(prs.slide_layouts[0])
    slide.shapes.title.text = TITLE
    slide.placeholders[1].text = (
        f"Organization: {report.get('org','')}\n"
        f"Assessor: {report.get('assessor','')}\n"
        f"Sector: {report.get('sector','')}"
    )

    slide = prs.slides.add_slide(prs.slide_layouts[1])
    slide.shapes.title.text = "Summary"
    body = slide.shapes.placeholders[1].text_frame
    body.clear()
    body.paragraphs[0].text = (
        f"Overall readiness: {report['overall']:.2f} / {SCALE_MAX} ({report['overall_level']})"
    )
    body.add_paragraph().text = (
        f"Method: {len(report['responses'])} questions (scale {SCALE_MIN}-{SCALE_MAX}), "
        "averaged per dimension."
    )

    slide = prs.slides.add_slide(prs.slide_layouts[5])
    slide.shapes.title.text = "Dimension Scores"
    scores, levels = report["dimension_scores"], report["levels"]
    rows, cols = len(DIMENSIONS) + 1, 3
    table = slide.shapes.add_table(
        rows, cols, Inches(0.8), Inches(1.5), Inches(8.0), Inches(0.8 + 0.35 * rows)
    ).table
    for j, head in enumerate(("Dimension", "Score", "Level")):
        table.cell(0, j).text = head
    for i, dim in enumerate(DIMENSIONS, start=1):
        table.cell(i, 0).text = DIMENSION_LABELS[dim]
        table.cell(i, 1).text = f"{scores[dim]:.2f}"
        table.cell(i, 2).text = levels[dim]

    slide = prs.slides.add_slide(prs.slide_layouts[1])
    slide.shapes.title.text = "Quick Interpretation"
    tf = slide.placeholders[1].text_frame
    tf.clear()
    bands = [f"{rng} - {label}: {meaning}" for rng, label, meaning in _band_ranges()]
    tf.paragraphs[0].text = bands[0]
    for line in bands[1:]:
        tf.add_paragraph().text = line
    prs.save(buf)


@app.callback(
    Output("dl-ppt-out", "data"),
    Input("dl-ppt", "n_clicks"),
    State("answers-store", "data"),
    State("org-name", "value"),
    State("assessor", "value"),
    State("sector", "value"),
    prevent_initial_call=True,
)
def download_ppt(_, data, org, assessor, sector):
    """Download the results as a PPTX file."""
    report = _report_or_prevent(data, org, assessor, sector)
    logger.info("Exporting PPTX report")
    return dcc.send_bytes(
        lambda b: _write_ppt_bytes(b, report), "Readiness_Assessment.pptx"
    )


def _img_from_fig(fig, width=720, height=420, scale=2):
    # Requires kaleido installed
    png_bytes = pio.to_image(fig, format="png", width=width, height=height, scale=scale)
    return io.BytesIO(png_bytes)


def _write_pdf_bytes(buf, report, theme="light", charts=True):
    doc = SimpleDocTemplate(
        buf, pagesize=A4, leftMargin=16, rightMargin=16, topMargin=16, bottomMargin=16
    )
    styles = getSampleStyleSheet()
    story = [
        Paragraph(f"<b>{TITLE}</b>", styles["Title"]),
        Spacer(1, 8),
        Paragraph(
            f"Organization: {escape(report.get('org', ''))}&nbsp;&nbsp;&nbsp; "
            f"Assessor: {escape(report.get('assessor', ''))}&nbsp;&nbsp;&nbsp; "
            f"Sector: {escape(report.get('sector', ''))}",
            styles["Normal"],
        ),
        Spacer(1, 10),
        Paragraph(
            f"<b>Overall readiness:</b> {report['overall']:.2f} ({report['overall_level']})",
            styles["Heading3"],
        ),
        Spacer(1, 8),
    ]

    scores, levels = report["dimension_scores"], report["levels"]
    tbl_data = [["Dimension", "Score", "Level"]] + [
        [DIMENSION_LABELS[d], f"{scores[d]:.2f}", levels[d]] for d in DIMENSIONS
    ]
    avail = A4[0] - 72
    col0 = 200
    tbl = Table(tbl_data, colWidths=[col0, 80, avail - col0 - 80], hAlign="LEFT")
    tbl.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#e9ebf3")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.HexColor("#0b1020")),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("ALIGN", (1, 1), (1, -1), "RIGHT"),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
                ("TOPPADDING", (0, 0), (-1, 0), 6),
            ]
        )
    )
    story += [
        Paragraph("<b>Dimension Scores</b>", styles["Heading3"]),
        Spacer(1, 6),
        tbl,
        Spacer(1, 12),
    ]

    # Charts (PNG via kaleido)
    if charts:
        figs = [
            ("Readiness Radar", radar_figure(report["series"], theme)),
            ("Dimension Scores", bar_figure(report["series"], theme)),
        ]
        for title, fig in figs:
            story += [Paragraph(f"<b>{title}</b>", styles["Heading3"]), Spacer(1, 6)]
            img_buf = _img_from_fig(fig, width=520, height=320, scale=2)
            story += [RLImage(img_buf, width=520, height=320), Spacer(1, 12)]

    bullets = ListFlowable(
        [
            ListItem(Paragraph(f"<b>{rng}</b> - {label}: {meaning}", styles["Normal"]))
            for rng, label, meaning in _band_ranges()
        ],
        bulletType="bullet",
    )
    story += [
        Paragraph("<b>Quick Interpretation</b>", styles["Heading3"]),
        Spacer(1, 6),
        bullets,
    ]

    doc.build(story)


@app.callback(
    Output("dl-pdf-out", "data"),
    Input("dl-pdf", "n_clicks"),
    State("answers-store", "data"),
    State("org-name", "value"),
    State("assessor", "value"),
    State("sector", "value"),
    State("theme-store", "data"),
    prevent_initial_call=True,
)
def download_pdf(_, data, org, assessor, sector, theme):
    """
    Download the results as a PDF file.

    Args:
        _ (int): Click count of the "Download PDF" button.
        data (dict): The answers, as stored in the "answers-store".
        org, assessor, sector (str): Report metadata from the header fields.
        theme (str, optional): The theme for the embedded charts. Defaults to "light".

    Returns:
        dict: dcc.Download payload containing the PDF data.
    """
    report = _report_or_prevent(data, org, assessor, sector)
    logger.info("Exporting PDF report")
    return dcc.send_bytes(
        lambda b: _write_pdf_bytes(b, report, theme or "light"),
        "Readiness_Assessment.pdf",
    )


# Theme toggle -> update page class and store
@app.callback(
    Output("page-root", "className"),
    Output("theme-store", "data"),
    Input("theme-switch", "on"),
)
def apply_theme(is_on):
    """
    Toggle the page theme class and store the current theme value.

    Args:
        is_on (bool): The on/off state of the theme switch.

    Returns:
        tuple: A pair of (page class name, theme name).
    """
    theme = "dark" if is_on else "light"
    return f"page theme-{theme}", theme


# ---------- Main -------------------
def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting on %s:%s (debug=%s)", config.HOST, config.PORT, config.DEBUG)
    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)


if __name__ == "__main__":
    main()
