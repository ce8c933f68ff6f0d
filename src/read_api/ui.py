from __future__ import annotations

import html
import json

from src.transforms.countries import Region


# Flag images that fail to load are swapped for this placeholder.
FLAG_PLACEHOLDER_URL = "https://via.placeholder.com/300x200?text=Flag+not+found"


COUNTRIES_PAGE_HTML = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width,initial-scale=1"/>
  <title>Country Explorer</title>
  <style>
    :root { color-scheme: light dark; }
    body { font-family: ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif; margin: 24px; line-height: 1.35; }
    header { display:flex; flex-wrap:wrap; align-items:baseline; justify-content:space-between; gap:16px; }
    h1 { margin:0; font-size: 22px; }
    .controls { display:flex; gap: 8px; }
    .controls input, .controls select { padding: 6px 8px; font-size: 14px; }
    .banner { display:none; margin-top: 16px; padding: 10px 12px; border-radius: 8px; border: 1px solid #d33; color: #d33; }
    .spinner { display:none; margin-top: 16px; opacity: .7; }
    .grid { display:grid; grid-template-columns: repeat(auto-fill, minmax(220px, 1fr)); gap: 12px; margin-top: 16px; }
    .country-card { border: 1px solid rgba(127,127,127,.35); border-radius: 10px; overflow:hidden; cursor:pointer; }
    .country-card:focus, .country-card:hover { outline: 2px solid rgba(60,99,243,.6); }
    .country-flag { width:100%; height:130px; object-fit:cover; display:block; }
    .country-info { padding: 10px 12px; }
    .country-name { margin: 0 0 6px 0; font-size: 16px; }
    .country-details p { margin: 2px 0; font-size: 13px; }
    .no-results { grid-column: 1 / -1; opacity: .7; }
    .modal { display:none; position:fixed; inset:0; background: rgba(0,0,0,.55); }
    .modal-content { background: Canvas; color: CanvasText; max-width: 480px; margin: 8vh auto; padding: 20px; border-radius: 12px; position:relative; }
    .modal-content img { max-width: 100%; border-radius: 6px; }
    .modal-details { display:grid; grid-template-columns: 1fr 1fr; gap: 8px; margin-top: 12px; }
    .modal-detail-item strong { display:block; font-size: 12px; opacity: .7; }
    .modal-error { color: #d33; }
    .close { position:absolute; top: 8px; right: 12px; font-size: 22px; background:none; border:none; cursor:pointer; color: inherit; }
  </style>
</head>
<body>
  <header>
    <h1>Country Explorer</h1>
    <div class="controls">
      <input id="searchInput" type="search" placeholder="Search by name" autocomplete="off"/>
      <select id="regionFilter">
        <option value="">All regions</option>
        __REGION_OPTIONS__
      </select>
    </div>
  </header>

  <div id="errorMessage" class="banner" role="alert"></div>
  <div id="loading" class="spinner">Loading countries…</div>
  <main id="countriesGrid" class="grid"></main>

  <div id="countryModal" class="modal">
    <div class="modal-content" role="dialog" aria-modal="true">
      <button type="button" class="close" aria-label="Close">&times;</button>
      <div id="modalContent"></div>
    </div>
  </div>

  <script>
    const STATES = Object.freeze({ LOADING: 'loading', LOADED: 'loaded', FILTERED: 'filtered', ERROR: 'error' });

    function escapeHtml(text) {
      return String(text ?? '')
        .replace(/&/g, '&amp;')
        .replace(/</g, '&lt;')
        .replace(/>/g, '&gt;')
        .replace(/"/g, '&quot;')
        .replace(/'/g, '&#39;');
    }

    function matchesFilters(country, searchTerm, region) {
      const matchesSearch = String(country.name ?? '').toLowerCase().includes(searchTerm.toLowerCase());
      const matchesRegion = region === '' || country.region === region;
      return matchesSearch && matchesRegion;
    }

    function createCountriesApp({ doc, fetchImpl, apiBaseUrl, logger, placeholderUrl }) {
      const el = {
        searchInput: doc.getElementById('searchInput'),
        regionFilter: doc.getElementById('regionFilter'),
        grid: doc.getElementById('countriesGrid'),
        loading: doc.getElementById('loading'),
        error: doc.getElementById('errorMessage'),
        modal: doc.getElementById('countryModal'),
        modalContent: doc.getElementById('modalContent'),
        closeButton: doc.querySelector('#countryModal .close'),
      };
      const numberFormat = new Intl.NumberFormat(undefined, { useGrouping: true });

      const app = {
        state: STATES.LOADING,
        countries: [],
        filteredCountries: [],
      };

      function formatPopulation(population) {
        return numberFormat.format(Number(population) || 0);
      }

      function setBanner(message) {
        el.error.textContent = message;
        el.error.style.display = message ? 'block' : 'none';
      }

      function flagImage(country, className) {
        const img = doc.createElement('img');
        if (className) img.className = className;
        img.src = country.flag || placeholderUrl;
        img.alt = 'Flag of ' + (country.name || 'unknown country');
        img.addEventListener('error', () => { img.src = placeholderUrl; }, { once: true });
        return img;
      }

      function detailLine(label, value) {
        const p = doc.createElement('p');
        const strong = doc.createElement('strong');
        strong.textContent = label + ': ';
        p.append(strong, doc.createTextNode(value));
        return p;
      }

      function renderCard(country) {
        const card = doc.createElement('div');
        card.className = 'country-card';
        card.tabIndex = 0;

        const info = doc.createElement('div');
        info.className = 'country-info';
        const title = doc.createElement('h3');
        title.className = 'country-name';
        title.textContent = country.name;
        const details = doc.createElement('div');
        details.className = 'country-details';
        details.append(
          detailLine('Region', country.region),
          detailLine('Capital', country.capital || 'N/A'),
          detailLine('Population', formatPopulation(country.population)),
          detailLine('Code', country.alpha2Code),
        );
        info.append(title, details);
        card.append(flagImage(country, 'country-flag'), info);

        card.addEventListener('click', () => showCountryDetail(country));
        card.addEventListener('keydown', (e) => {
          if (e.key === 'Enter') showCountryDetail(country);
        });
        return card;
      }

      function render() {
        el.grid.replaceChildren();
        if (app.filteredCountries.length === 0) {
          const empty = doc.createElement('div');
          empty.className = 'no-results';
          empty.textContent = 'No countries found';
          el.grid.append(empty);
          return;
        }
        el.grid.append(...app.filteredCountries.map(renderCard));
      }

      function applyFilters() {
        if (app.state === STATES.LOADING || app.state === STATES.ERROR) return;
        const searchTerm = el.searchInput.value;
        const region = el.regionFilter.value;
        app.filteredCountries = app.countries.filter((c) => matchesFilters(c, searchTerm, region));
        app.state = STATES.FILTERED;
        render();
      }

      function showCountryDetail(country) {
        try {
          const rows = [
            ['Capital', country.capital || 'N/A'],
            ['Region', country.region],
            ['Population', formatPopulation(country.population)],
            ['Alpha-2 code', country.alpha2Code],
            ['Alpha-3 code', country.alpha3Code],
          ];
          el.modalContent.innerHTML =
            '<h2>' + escapeHtml(country.name) + '</h2>' +
            '<div class="modal-details">' +
            rows.map(([label, value]) =>
              '<div class="modal-detail-item"><strong>' + escapeHtml(label) + '</strong>' +
              '<span>' + escapeHtml(value) + '</span></div>'
            ).join('') +
            '</div>';
          el.modalContent.insertBefore(flagImage(country), el.modalContent.children[1]);
        } catch (error) {
          logger.error('Could not render country details:', error);
          el.modalContent.replaceChildren();
          const msg = doc.createElement('p');
          msg.className = 'modal-error';
          msg.textContent = 'Could not display details for this country.';
          el.modalContent.append(msg);
        }
        el.modal.style.display = 'block';
        setTimeout(() => el.closeButton?.focus(), 100);
      }

      function closeModal() {
        el.modal.style.display = 'none';
      }

      async function load() {
        app.state = STATES.LOADING;
        el.loading.style.display = 'block';
        el.grid.replaceChildren();
        setBanner('');
        try {
          const response = await fetchImpl(apiBaseUrl + '/countries');
          if (!response.ok) {
            throw new Error('HTTP error: ' + response.status);
          }
          const countries = await response.json();
          if (!Array.isArray(countries)) {
            throw new Error('Unexpected payload: expected a list of countries');
          }
          app.countries = countries;
          app.filteredCountries = countries;
          app.state = STATES.LOADED;
          render();
        } catch (error) {
          app.state = STATES.ERROR;
          setBanner('Could not load countries. Check that the API is running at ' + (apiBaseUrl || doc.location.origin) + '.');
          logger.error('Failed to load countries:', error);
        } finally {
          el.loading.style.display = 'none';
        }
      }

      el.searchInput.addEventListener('input', applyFilters);
      el.regionFilter.addEventListener('change', applyFilters);
      el.closeButton.addEventListener('click', closeModal);
      el.modal.addEventListener('click', (e) => {
        if (e.target === el.modal) closeModal();
      });
      doc.addEventListener('keydown', (e) => {
        if (e.key === 'Escape') closeModal();
      });

      return { state: () => app.state, load, applyFilters, showCountryDetail, closeModal };
    }

    function start(doc) {
      const app = createCountriesApp({
        doc,
        fetchImpl: (url) => fetch(url, { headers: { Accept: 'application/json' } }),
        apiBaseUrl: __API_BASE_URL__,
        logger: console,
        placeholderUrl: __PLACEHOLDER_URL__,
      });
      app.load();
    }

    if (document.readyState === 'loading') {
      document.addEventListener('DOMContentLoaded', () => start(document));
    } else {
      start(document);
    }
  </script>
</body>
</html>
"""


def _js_string(value: str) -> str:
    # json.dumps does not escape "</", which would end the inline <script>.
    return json.dumps(value).replace("</", "<\\/")


def render_countries_page(api_base_url: str = "") -> str:
    options = "\n        ".join(
        f'<option value="{html.escape(r)}">{html.escape(r)}</option>' for r in Region.values()
    )
    return (
        COUNTRIES_PAGE_HTML.replace("__REGION_OPTIONS__", options)
        .replace("__API_BASE_URL__", _js_string(api_base_url.rstrip("/")))
        .replace("__PLACEHOLDER_URL__", _js_string(FLAG_PLACEHOLDER_URL))
    )
