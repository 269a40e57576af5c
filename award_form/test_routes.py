"""
Route tests using the Flask test client.
"""

from datetime import date

import pytest

from award_form import routes
from award_form.binding import flatten_payload
from award_form.receipt import verify_receipt_integrity
from award_form.workflow import PROCESSING_ERROR_MESSAGE


TODAY = date(2025, 6, 15)


@pytest.fixture(autouse=True)
def fixed_today(monkeypatch):
    monkeypatch.setattr(routes, '_today', lambda: TODAY)


def form_data(payload):
    return dict(flatten_payload(payload))


class TestFormPages:
    def test_index_renders_empty_form(self, client):
        response = client.get('/')
        assert response.status_code == 200
        html = response.get_data(as_text=True)
        assert 'name="Name"' in html
        assert 'name="ScientificPublications[0].Title"' in html
        assert 'id="addScientificPublication"' in html
        assert 'data-max-items="10"' in html
        assert 'is-invalid' not in html

    def test_dropdowns_rendered_from_workflow_options(self, client, monkeypatch):
        class NarrowWorkflow(routes.SubmissionWorkflow):
            def start(self):
                outcome = super().start()
                outcome.options['qualification'] = ['PhD']
                return outcome

        monkeypatch.setattr(routes, '_workflow', NarrowWorkflow)
        html = client.get('/').get_data(as_text=True)
        assert '<option value="PhD">PhD</option>' in html
        assert '<option value="Master">' not in html

    def test_privacy_page(self, client):
        assert client.get('/privacy').status_code == 200

    def test_success_without_message_redirects(self, client):
        response = client.get('/success')
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/')

    def test_error_page_default_message(self, client):
        response = client.get('/error')
        assert 'An error occurred while processing your request.' in response.get_data(as_text=True)


class TestFormSubmit:
    def test_valid_submission_redirects_to_success(self, client, valid_payload):
        response = client.post('/', data=form_data(valid_payload))
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/success')

        page = client.get('/success').get_data(as_text=True)
        assert 'Application for Ali Researcher submitted successfully!' in page

    def test_success_message_shown_once(self, client, valid_payload):
        client.post('/', data=form_data(valid_payload))
        client.get('/success')
        assert client.get('/success').status_code == 302

    def test_invalid_submission_redisplays_with_values(self, client, valid_payload):
        valid_payload['Name'] = 'Al'
        response = client.post('/', data=form_data(valid_payload))
        assert response.status_code == 200
        html = response.get_data(as_text=True)
        assert 'Name must be between 3 and 100 characters' in html
        assert 'value="Al"' in html
        assert 'is-invalid' in html
        assert 'Corrosion sensing in marine concrete' in html

    def test_redisplay_keeps_entry_count(self, client, valid_payload):
        valid_payload['Name'] = ''
        valid_payload['Patents'].append({'PatentDetails': 'x', 'InventorRole': 'Co-Inventor'})
        html = client.post('/', data=form_data(valid_payload)).get_data(as_text=True)
        assert 'name="Patents[1].PatentDetails"' in html
        assert 'name="Patents[2].PatentDetails"' not in html

    def test_redisplay_keeps_text_exactly_as_typed(self, client, valid_payload):
        valid_payload['Name'] = ''
        valid_payload['ScientificPublications'][0]['Title'] = 'Serum levels <10 mg/L versus >20 mg/L in adults'
        valid_payload['ScientificPublications'][0]['PaperLink'] = 'https://example.org/view?id=5&contentType=pdf'
        html = client.post('/', data=form_data(valid_payload)).get_data(as_text=True)
        assert 'value="Serum levels &lt;10 mg/L versus &gt;20 mg/L in adults"' in html
        assert 'value="https://example.org/view?id=5&amp;contentType=pdf"' in html

    def test_markup_is_escaped_not_rendered(self, client, valid_payload):
        valid_payload['Name'] = '<script>alert(1)</script>'
        valid_payload['Discipline'] = ''
        html = client.post('/', data=form_data(valid_payload)).get_data(as_text=True)
        assert '<script>alert(1)</script>' not in html
        assert '&lt;script&gt;alert(1)&lt;/script&gt;' in html

    def test_section_problem_summary(self, client, valid_payload):
        valid_payload['Books'][0]['ISBN'] = 'ABC'
        valid_payload['Books'][0]['Year'] = '2019'
        html = client.post('/', data=form_data(valid_payload)).get_data(as_text=True)
        assert '3 problem(s) found in this section.' in html

    def test_processing_fault_redisplays_with_general_error(self, client, valid_payload, monkeypatch):
        def failing_workflow():
            def explode(record, confirmation):
                raise RuntimeError('downstream unavailable')
            return routes.SubmissionWorkflow(on_accept=explode)

        monkeypatch.setattr(routes, '_workflow', failing_workflow)
        response = client.post('/', data=form_data(valid_payload))
        assert response.status_code == 200
        html = response.get_data(as_text=True)
        assert 'An error occurred while processing your application. Please try again.' in html
        assert 'value="Ali Researcher"' in html


class TestValidateApi:
    def test_valid_payload(self, client, valid_payload):
        response = client.post('/api/validate', json=valid_payload)
        assert response.status_code == 200
        assert response.get_json() == {'ok': True, 'errors': []}

    def test_invalid_payload(self, client, valid_payload):
        valid_payload['ScientificPublications'][0]['PublicationYear'] = '2019'
        response = client.post('/api/validate', json=valid_payload)
        assert response.status_code == 422
        data = response.get_json()
        assert data['ok'] is False
        assert [e['field'] for e in data['errors']] == [
            'ScientificPublications[0].PublicationYear',
            'ScientificPublications[0].PublicationYear',
        ]

    def test_values_validated_as_submitted(self, client, valid_payload):
        valid_payload['ScientificPublications'][0]['Title'] = 'Serum levels <10 mg/L versus >20 mg/L in adults'
        valid_payload['ScientificPublications'][0]['PaperLink'] = 'https://example.org/view?id=5&contentType=pdf'
        response = client.post('/api/validate', json=valid_payload)
        assert response.status_code == 200

    def test_empty_object_reports_missing_fields(self, client):
        response = client.post('/api/validate', json={})
        assert response.status_code == 422
        fields = [e['field'] for e in response.get_json()['errors']]
        assert 'Name' in fields
        assert 'DateOfJoining' in fields
        assert 'Books' in fields

    def test_missing_payload(self, client):
        response = client.post('/api/validate', data='not json', content_type='text/plain')
        assert response.status_code == 400
        assert response.get_json()['errors'][0]['code'] == 'missing_payload'


class TestSubmitApi:
    def test_json_confirmation(self, client, valid_payload):
        response = client.post('/api/submit', json=valid_payload, headers={'Accept': 'application/json'})
        assert response.status_code == 200
        data = response.get_json()
        assert data['ok'] is True
        assert data['confirmation']['message'] == 'Application for Ali Researcher submitted successfully!'

    def test_pdf_receipt(self, client, valid_payload):
        response = client.post('/api/submit', json=valid_payload)
        assert response.status_code == 200
        assert response.mimetype == 'application/pdf'
        assert response.data[:4] == b'%PDF'
        assert verify_receipt_integrity(response.data, response.headers['X-Receipt-SHA256'])

    def test_rejected(self, client, valid_payload):
        valid_payload['DateOfJoining'] = '2025-06-16'
        response = client.post('/api/submit', json=valid_payload, headers={'Accept': 'application/json'})
        assert response.status_code == 422
        assert [e['code'] for e in response.get_json()['errors']] == ['future_date', 'min_service']

    def test_processing_fault(self, client, valid_payload, monkeypatch):
        def failing_workflow():
            def explode(record, confirmation):
                raise RuntimeError('downstream unavailable')
            return routes.SubmissionWorkflow(on_accept=explode)

        monkeypatch.setattr(routes, '_workflow', failing_workflow)
        response = client.post('/api/submit', json=valid_payload)
        assert response.status_code == 500
        assert response.get_json()['errors'][0]['message'] == PROCESSING_ERROR_MESSAGE

    def test_missing_payload(self, client):
        assert client.post('/api/submit').status_code == 400


class TestSectionItemsApi:
    def test_add_item(self, client):
        response = client.post('/api/sections/Books/items', json={'count': 3})
        assert response.status_code == 201
        data = response.get_json()
        assert data['count'] == 4
        assert data['block']['heading'] == 'Book 4'
        assert data['focus_id'] == 'Books_3__Title'
        assert all(f['value'] == '' for f in data['block']['fields'])

    def test_default_count(self, client):
        response = client.post('/api/sections/Patents/items')
        assert response.status_code == 201
        assert response.get_json()['count'] == 2

    def test_cap_reached(self, client):
        response = client.post('/api/sections/Books/items', json={'count': 10})
        assert response.status_code == 409
        data = response.get_json()
        assert data['error'] == 'You can add a maximum of 10 entries.'
        assert data['count'] == 10

    def test_unknown_section(self, client):
        assert client.post('/api/sections/Hobbies/items', json={'count': 1}).status_code == 404

    @pytest.mark.parametrize('count', [0, -1, 'three', True])
    def test_bad_count(self, client, count):
        assert client.post('/api/sections/Books/items', json={'count': count}).status_code == 400


def test_unknown_api_route_returns_json(client):
    response = client.get('/api/nothing-here')
    assert response.status_code == 404
