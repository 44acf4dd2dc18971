import io
from flask import Flask, request, jsonify, Response
from config import Config
from db_check import make_connector, run_checks
from tap import TapReporter

app = Flask(__name__)
app.config.from_object(Config)


def _run(databases):
    # Diagnostics share the body with the results so the response reads like `prove -v`
    stream = io.StringIO()
    reporter = TapReporter(out=stream, err=stream)
    connect = make_connector(app.config)
    status = run_checks(reporter, connect, databases)
    return reporter, stream.getvalue(), status


def _requested_databases():
    databases = [db for db in request.args.getlist('database') if db]
    return databases or [app.config['DB_NAME']]


@app.route('/check', methods=['GET'])
def check():
    """
    Runs the database checks and returns the raw TAP stream.
    URL: /check?database=<name>[&database=<other>]
    200 when every test passed, 503 otherwise.
    """
    _, body, status = _run(_requested_databases())
    return Response(body, status=200 if status == 0 else 503, mimetype='text/plain')


@app.route('/check.json', methods=['GET'])
def check_json():
    databases = _requested_databases()
    reporter, _, status = _run(databases)
    return jsonify({
        "database": databases if len(databases) > 1 else databases[0],
        "tests": reporter.results,
        "exit_status": status
    }), 200 if status == 0 else 503


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=5000)
