"""
نماذج (Forms) الكورسات
Manassa - Bilingual E-Learning Platform
"""

import json

from django import forms
from django.conf import settings

from .grading import validate_question
from .models import Course, Chapter, Quiz, Question


def grade_choices():
    return [('', 'جميع الصفوف')] + [(g, g) for g in settings.STUDENT_GRADES]


class CourseCreateForm(forms.ModelForm):
    """إنشاء كورس بالعنوان فقط ثم استكمال البيانات"""

    class Meta:
        model = Course
        fields = ['title']
        widgets = {
            'title': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'عنوان الكورس'}),
        }


class CourseForm(forms.ModelForm):
    grade = forms.ChoiceField(label='الصف الدراسي', required=False, choices=())

    class Meta:
        model = Course
        fields = ['title', 'description', 'image_url', 'price', 'grade']
        widgets = {
            'title': forms.TextInput(attrs={'class': 'form-control'}),
            'description': forms.Textarea(attrs={'class': 'form-control', 'rows': 4}),
            'image_url': forms.URLInput(attrs={'class': 'form-control'}),
            'price': forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01', 'min': '0'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['grade'].choices = grade_choices()
        self.fields['grade'].widget.attrs['class'] = 'form-select'

    def clean_grade(self):
        return self.cleaned_data.get('grade') or None


class ChapterForm(forms.ModelForm):

    class Meta:
        model = Chapter
        fields = ['title', 'description', 'is_free']
        widgets = {
            'title': forms.TextInput(attrs={'class': 'form-control'}),
            'description': forms.Textarea(attrs={'class': 'form-control', 'rows': 4}),
        }


class ChapterVideoForm(forms.Form):
    """تعيين مصدر الفيديو من صفحة تعديل الفصل"""

    video_type = forms.ChoiceField(label='نوع الفيديو', choices=Chapter.VideoType.choices)
    url = forms.CharField(
        label='الرابط',
        max_length=1000,
        widget=forms.TextInput(attrs={'class': 'form-control', 'dir': 'ltr'})
    )


class QuizForm(forms.ModelForm):

    class Meta:
        model = Quiz
        fields = ['title', 'description', 'max_attempts', 'is_published']
        widgets = {
            'title': forms.TextInput(attrs={'class': 'form-control'}),
            'description': forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
            'max_attempts': forms.NumberInput(attrs={'class': 'form-control', 'min': '1'}),
        }


class QuestionForm(forms.ModelForm):
    """
    الاختيارات تُكتب سطراً لكل اختيار.
    """

    options_text = forms.CharField(
        label='الاختيارات (سطر لكل اختيار)',
        required=False,
        widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 4})
    )

    class Meta:
        model = Question
        fields = ['text', 'type', 'correct_answer', 'points']
        widgets = {
            'text': forms.Textarea(attrs={'class': 'form-control', 'rows': 2}),
            'type': forms.Select(attrs={'class': 'form-select'}),
            'correct_answer': forms.TextInput(attrs={'class': 'form-control'}),
            'points': forms.NumberInput(attrs={'class': 'form-control', 'min': '1'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance.pk and self.instance.options:
            self.fields['options_text'].initial = '\n'.join(self.instance.options)

    def clean(self):
        cleaned_data = super().clean()
        raw = cleaned_data.get('options_text') or ''
        options = [line.strip() for line in raw.splitlines() if line.strip()]
        question_type = cleaned_data.get('type')

        if question_type == Question.Type.TRUE_FALSE:
            options = ['true', 'false']
        elif question_type == Question.Type.SHORT_ANSWER:
            options = []

        for error in validate_question(question_type, options, cleaned_data.get('correct_answer')):
            self.add_error(None, error)

        cleaned_data['options'] = options
        return cleaned_data

    def save(self, commit=True):
        question = super().save(commit=False)
        question.options = self.cleaned_data['options']
        if question.type == Question.Type.TRUE_FALSE:
            question.correct_answer = question.correct_answer.strip().lower()
        if commit:
            question.save()
        return question


def parse_reorder_payload(body):
    """{"list": [{"id": 1, "position": 0}, ...]} -> [(id, position), ...]"""
    try:
        data = json.loads(body or b'{}')
        items = [(int(item['id']), int(item['position'])) for item in data['list']]
    except (ValueError, KeyError, TypeError):
        return None
    if any(position < 0 for _, position in items):
        return None
    return items
